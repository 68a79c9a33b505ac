from .Users import User
from .Sensor import Sensor
from .Batch import Batch, VolumeUnit
from .Association import Association
from .Measurement import Measurement, TemperatureUnit

__all__ = [
    "User",
    "Sensor",
    "Batch",
    "VolumeUnit",
    "Association",
    "Measurement",
    "TemperatureUnit",
]
