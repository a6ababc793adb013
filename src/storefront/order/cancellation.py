"""Order cancellation — command and handler."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import InvalidTransition, Order, TransitionActor

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(max_length=500)
    cancelled_by = String(max_length=50, default=TransitionActor.CUSTOMER.value)


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        try:
            order = repo.get(command.order_id)
        except ObjectNotFoundError:
            logger.warning("Cancellation for unknown order ignored", order_id=str(command.order_id))
            return None

        try:
            order.cancel(reason=command.reason, cancelled_by=command.cancelled_by)
        except InvalidTransition:
            logger.info(
                "Cancellation refused",
                order_id=str(order.id),
                status=order.status,
                cancelled_by=command.cancelled_by,
            )
            raise
        repo.add(order)

        logger.info("Order cancelled", order_id=str(order.id), cancelled_by=command.cancelled_by)
        return order.status
