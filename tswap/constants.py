"""
TSwap Constants

This module consolidates all global constants and environment configuration
used throughout the codebase. Constants are organized by category for easy
reference and maintenance.
"""
import ast
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_FILE_OUTPUT':                 'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# WARNING: THE VALUES BELOW ARE CONSENSUS-CRITICAL. CHANGING ANY OF THEM CHANGES
# MINTED SHARE COUNTS, SWAP OUTPUTS OR STAKING REWARDS, AND RESULTS WILL NO LONGER
# MATCH OTHER IMPLEMENTATIONS BIT FOR BIT.

# ==================================================================================
# IDENTITIES
# ==================================================================================
ZERO_ADDRESS = '0x0000000000000000000000000000000000000000'

# Sentinel identifier for the chain's native transfer unit
NATIVE_ASSET = '0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE'


# ==================================================================================
# EXCHANGE PARAMETERS
# ==================================================================================
# Swap fee: 0.3 %, applied as a floored 997/1000 multiplier
FEE_NUMERATOR = 997
FEE_DENOMINATOR = 1000

# Fixed-point scale of get_price results
PRICE_SCALE = 10 ** 9

LP_TOKEN_NAME = 'LPToken'
LP_TOKEN_SYMBOL = 'LP'


# ==================================================================================
# STAKING PARAMETERS
# ==================================================================================
# Historical stakers a pool needs before any withdrawal is accepted
STAKER_QUORUM = 3

REWARD_TOKEN_NAME = 'TitaniumSweet'
REWARD_TOKEN_SYMBOL = 'TSW'

DEFAULT_REWARD_RATE_PER_BLOCK = 10


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    __hash__ = int.__hash__


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
DEFAULTS = LOGGER_DEFAULTS
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Avoids exceptions by only calling ast.literal_eval for known literals.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    if s.casefold() in {"true", "false"}:
        # ast.literal_eval expects "True"/"False"
        return ast.literal_eval(s.title())
    return v

for key, default_raw in DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        namespace[key] = ConfigString(value_raw, default_val)
