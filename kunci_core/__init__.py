"""
Kunci Core Modules
"""

from .errors import *
from .payload import *
from .crypto import *
from .validation import *
from .settings import *
from .store import *
from .ui import *
