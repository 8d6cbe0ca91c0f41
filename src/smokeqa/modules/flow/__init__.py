from .stage import Stage, StageOutcome
from .sequencer import StageSequencer
from .context import FlowContext
from .app import build_cheek_drag, build_game_exit, build_main_logo, build_start_app
from .first_launch import build_first_launch
from .login import MAIN_SCREEN_MARKERS, build_login_again, build_login_first
from .logout import build_logout

__all__ = [
    "Stage",
    "StageOutcome",
    "StageSequencer",
    "FlowContext",
    "build_start_app",
    "build_main_logo",
    "build_cheek_drag",
    "build_game_exit",
    "build_first_launch",
    "build_login_first",
    "build_login_again",
    "build_logout",
    "MAIN_SCREEN_MARKERS",
]
