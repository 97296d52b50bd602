# Schemas package (re-export feature modules for stable imports)
from .common import *
from .otp import *
from .booking import *
