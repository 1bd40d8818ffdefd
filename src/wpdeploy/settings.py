from __future__ import annotations
import os

CONFIG_FILE = os.environ.get("WP_DEPLOY_CONFIG", "wp-cli.yml")
WP_CLI = os.environ.get("WP_DEPLOY_WP_CLI", "wp")
MAX_PASSES = int(os.environ.get("WP_DEPLOY_MAX_PASSES", "16"))

DEFAULT_VERBOSITY = 1
DEFAULT_PORT = "22"
DATE_FORMAT = "%Y_%m_%d-%H_%M"

VERSION = "1.2.0"

# Never synced by the core mode; user excludes are appended.
CORE_EXCLUDES = [
    "/wp-cli.phar",
    "/wp-cli.yml",
    "/.htaccess",
    "/.htaccess.dist",
    "/robots.txt",
    "/robots.txt.dist",
    "/wp-config.php",
    "/wp-content/uploads",
    "/wp-content/blogs.dir",
    "/wp-content/wp-rocket-config",
    "/wp-content/advanced-cache.php",
    "/wp-content/plugins",
    "/wp-content/themes",
]
