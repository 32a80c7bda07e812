from .user import User
from .reading import BloodSugarReading, BloodPressureReading
from .device import Device
from .chat_history import AIChatHistory

__all__ = [
    'User',
    'BloodSugarReading',
    'BloodPressureReading',
    'Device',
    'AIChatHistory',
]
