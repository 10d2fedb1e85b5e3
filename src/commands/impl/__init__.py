"""
Command implementations for goal tracker business logic.

Each command encapsulates a specific business operation and can be
executed independently of the API layer.
"""

from .attach_goal_image_command import AttachGoalImageCommand
from .create_goal_command import CreateGoalCommand
from .delete_goal_command import DeleteGoalCommand
from .health_check_command import HealthCheckCommand
from .list_goals_command import ListAllGoalsCommand, ListGoalsCommand
from .sign_up_command import SignUpCommand
from .update_goal_command import UpdateGoalCommand
from .view_goal_command import ViewGoalCommand

ALL_COMMANDS = (
    HealthCheckCommand,
    SignUpCommand,
    CreateGoalCommand,
    ListGoalsCommand,
    ListAllGoalsCommand,
    ViewGoalCommand,
    UpdateGoalCommand,
    DeleteGoalCommand,
    AttachGoalImageCommand,
)

__all__ = [
    "ALL_COMMANDS",
    "AttachGoalImageCommand",
    "CreateGoalCommand",
    "DeleteGoalCommand",
    "HealthCheckCommand",
    "ListAllGoalsCommand",
    "ListGoalsCommand",
    "SignUpCommand",
    "UpdateGoalCommand",
    "ViewGoalCommand",
]
