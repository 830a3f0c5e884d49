"""Fixed locations and names used across iis-commons."""

import os

DEFAULT_INSTALL_ROOT = "/opt/IBM/InformationServer"
HOST_MARKER_FILE = "/.dshome"
VERSION_XML = "Version.xml"

DEFAULT_CREDENTIAL_FILE = os.path.join(os.path.expanduser("~"), ".infosvrauth")
REMOTE_CREDENTIAL_FILE = "/tmp/.infosvrauth"
CREDENTIAL_FILE_MODE = 0o600

UNKNOWN_VERSION = "unknown"

SOURCE_PLACEHOLDER = "__SOURCE__"
TARGET_PLACEHOLDER = "__TARGET__"

# Exit code reported for operations refused before any process is spawned.
NOT_CONFIGURED_EXIT_CODE = -1
