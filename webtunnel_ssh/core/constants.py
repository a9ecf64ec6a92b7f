"""
Project constants definitions
"""

# ============================================================
# Exit Codes (sysexits.h)
# ============================================================

EXIT_OK = 0
EXIT_OSERR = 71
EXIT_CONFIG = 78

# ============================================================
# Tunnel Default Values
# ============================================================

EPHEMERAL_PORT = 0
DEFAULT_REMOTE_PORT = 22
DEFAULT_CONNECT_TIMEOUT = 30
DEFAULT_REMOTE_TIMEOUT = 300
DEFAULT_LOCAL_TIMEOUT = 7200
DEFAULT_LOCAL_BIND_ADDRESS = "127.0.0.1"
TUNNEL_DESTINATION_HOST = "localhost"

# ============================================================
# WebTunnel Protocol
# ============================================================

WEBTUNNEL_PROTOCOL = "com.appinf.webtunnel.server/1.0"
WEBTUNNEL_REMOTE_PORT_HEADER = "X-WebTunnel-RemotePort"
RELAY_BUFFER_SIZE = 8192

# ============================================================
# TLS / Proxy Default Values
# ============================================================

DEFAULT_TLS_CIPHERS = "ALL:!ADH:!LOW:!EXP:!MD5:@STRENGTH"
DEFAULT_PROXY_PORT = 80

# ============================================================
# SSH Client
# ============================================================

DEFAULT_SSH_CLIENT = "ssh"
WINDOWS_SSH_CLIENTS = ("ssh.exe", "putty.exe")
SCP_CLIENT = "scp"

# ============================================================
# Configuration
# ============================================================

DEFAULT_CONFIG_DIR = "~/.webtunnel"
DEFAULT_CONFIG_FILES = (
    "webtunnel-ssh.properties",
    "webtunnel-ssh.toml",
)
DEFAULT_LOG_LEVEL = "WARNING"
