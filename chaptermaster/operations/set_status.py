"""set-status: move a story element through its workflow."""

from ..core.constants import ElementStatus, ElementType
from ..exceptions import PreconditionFailed
from .result import OperationContext, OperationResult, operation


@operation("set status")
async def set_status(
    ctx: OperationContext,
    element_type: str,
    element_id: int,
    status: str,
) -> OperationResult:
    element_type = ElementType(element_type)
    status = ElementStatus(status)

    with ctx.store.transaction() as bible:
        element = bible.get_element(element_type.value, element_id)
        if element is None:
            raise PreconditionFailed(f"No {element_type.value} with ID {element_id} in the story bible.")
        previous = element.status
        bible.set_status(element_type.value, element_id, status)

    return OperationResult(
        success=True,
        message=f'✅ {element_type.value.capitalize()} "{element.title}" is now {status.value} (was {previous.value}).',
        data={"element": element.to_dict(), "previousStatus": previous.value},
    )
