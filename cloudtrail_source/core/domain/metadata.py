"""Fixed identity the plugin reports to its host."""

from __future__ import annotations

PLUGIN_ID = 2
PLUGIN_NAME = "cloudtrail_file"
PLUGIN_DESCRIPTION = (
    "reads cloudtrail JSON data saved to file in the directory specified in the settings"
)

TYPE_SOURCE_PLUGIN = 1
TYPE_EXTRACTOR_PLUGIN = 2
