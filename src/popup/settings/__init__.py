"""Settings for the PopUp POS backend.

Split by concern; every module reads its values with python-decouple.
"""

from .base import *  # noqa: F403
from .ninja import *  # noqa: F403
from .observability import *  # noqa: F403
from .pos import *  # noqa: F403
