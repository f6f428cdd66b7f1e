# Local configuration file overrides standard config values - never commit this file!
# Used for changing user defaults
from passvault.config.config_vault import PASS_DEFAULTS

ARGON_TIME = 4
ARGON_MEMORY = 256 * 1024
PASS_DEFAULTS["length"] = 24
PASS_DEFAULTS["use_symbols"] = False

# Rename this file to config_local.py to enable it
