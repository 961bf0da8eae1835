"""
Utility modules for the dashboard bot
"""
from .admission import AdmissionGate
from .config_loader import BotConfig, load_bot_config

__all__ = [
    'AdmissionGate',
    'BotConfig',
    'load_bot_config',
]
