from .chat_cmds import register as register_chat
from .config_cmds import register_config

__all__ = [
    "register_chat",
    "register_config",
]
