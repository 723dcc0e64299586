"""
Route action intents to a controller.
"""
from typing import Optional

from .types import (
    Action, Click, CloseTab, ConfirmEditOption, ControllerProto, DisableTextFieldMode,
    EnableTextFieldMode, GoBack, GoForward, MoveCursor, NewTab, NextTab, NextTextField,
    PreviousTab, PreviousTextField, Refresh, Scroll, SelectTextField,
)


async def dispatch(controller: ControllerProto, action: Action) -> Optional[int]:
    """
    Execute one action on the controller.

    Returns:
        The field count for EnableTextFieldMode, otherwise None
    """
    if isinstance(action, Scroll):
        await controller.scroll(action.delta_x, action.delta_y)
    elif isinstance(action, MoveCursor):
        await controller.move_cursor(action.x, action.y)
    elif isinstance(action, Click):
        await controller.click()
    elif isinstance(action, GoBack):
        await controller.go_back()
    elif isinstance(action, GoForward):
        await controller.go_forward()
    elif isinstance(action, NewTab):
        await controller.new_tab()
    elif isinstance(action, CloseTab):
        await controller.close_tab()
    elif isinstance(action, Refresh):
        await controller.refresh()
    elif isinstance(action, NextTab):
        await controller.next_tab()
    elif isinstance(action, PreviousTab):
        await controller.previous_tab()
    elif isinstance(action, EnableTextFieldMode):
        return await controller.enable_text_field_mode()
    elif isinstance(action, DisableTextFieldMode):
        await controller.disable_text_field_mode()
    elif isinstance(action, NextTextField):
        await controller.next_text_field(action.index)
    elif isinstance(action, PreviousTextField):
        await controller.previous_text_field(action.index)
    elif isinstance(action, SelectTextField):
        await controller.select_text_field(action.index)
    elif isinstance(action, ConfirmEditOption):
        await controller.confirm_edit_option(action.option)
    else:
        raise TypeError(f"Unknown action: {action!r}")
    return None
