"""Sizes a signal, submits it as a market order and audits the outcome."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Optional

from ..errors import ExchangeError
from ..exchanges import OrderRequest
from ..monitoring import AuditLog
from ..risk import PositionSizer, RiskContext
from ..strategies import Signal, SignalAction
from .order_manager import OrderManager, OrderResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionContext:
    owner_id: str
    strategy_id: Optional[str] = None
    risk: RiskContext = field(default_factory=RiskContext)


class TradeExecutor:
    """Executes one signal per call and writes exactly one audit entry.

    Exchange rejections are not retried; they come back inside the returned
    :class:`OrderResult`. Anything else is audited and re-raised.
    """

    def __init__(
        self,
        order_manager: OrderManager,
        audit: AuditLog,
        sizer: Optional[PositionSizer] = None,
    ) -> None:
        self._orders = order_manager
        self._audit = audit
        self._sizer = sizer or PositionSizer()

    async def execute(self, signal: Signal, context: ExecutionContext) -> OrderResult:
        if signal.action is SignalAction.HOLD:
            raise ValueError('hold signals are not executable')

        audit = self._audit.bind(context.owner_id)
        metadata = {'signal': signal.as_dict(), 'strategy_id': context.strategy_id}
        request = OrderRequest(symbol=signal.symbol, side=signal.action.value, quantity=0.0)
        result: Optional[OrderResult] = None
        try:
            if signal.price <= 0:
                price = await self._orders.exchange.get_price(signal.symbol)
                signal = dataclasses.replace(signal, price=price)
                metadata['signal'] = signal.as_dict()
            request.quantity = self._sizer.size(signal, context.risk)
            if request.quantity > 0:
                result = await self._orders.submit(
                    request,
                    owner_id=context.owner_id,
                    strategy_id=context.strategy_id,
                )
        except ExchangeError as error:
            result = OrderResult.rejected(request, error.raw)
            await audit.error(f'Trade failed for {signal.symbol}', {**metadata, 'result': result})
            return result
        except Exception as error:
            await audit.error(
                f'Trade failed for {signal.symbol}: {error}',
                {**metadata, 'error': str(error)},
            )
            raise

        if result is None:
            result = OrderResult.rejected(request, {'msg': 'Order quantity rounds to zero'})
            await audit.warning(
                f'Trade skipped for {signal.symbol}: quantity rounds to zero',
                {**metadata, 'result': result},
            )
            return result

        logger.info('Executed %s %s %s', signal.action.value, request.quantity, signal.symbol)
        await audit.success(f'Trade executed for {signal.symbol}', {**metadata, 'result': result})
        return result


__all__ = ['ExecutionContext', 'TradeExecutor']
