# FlexiSync Default Configuration
# Default data configuration as Python dict and YAML generator

from typing import Any

import yaml

DEFAULT_CONFIG: dict[str, Any] = {
    "data_dir": "data",
    "payload_length": 2_500_000,
    "import_retries": 3,
    "allow_partial": False,
    "save_operation": "standard",
    "bulk": {
        "rest_path": "/JSON/bourne/v1",
    },
    "objects": [
        {
            "object_type": "Account",
            "query": "SELECT Id, Name, Migration_ID__c FROM Account",
            "external_id": "Migration_ID__c",
            "directory": "accounts",
            "has_record_types": False,
        },
        {
            "object_type": "Contact",
            "query": "SELECT Id, FirstName, LastName, Migration_ID__c, Account.Migration_ID__c FROM Contact",
            "external_id": "Migration_ID__c",
            "directory": "contacts",
            "cleanup_fields": ["Account"],
        },
    ],
    "hooks": {},
}


def generate_default_config() -> str:
    """Generate default configuration as YAML string with comments."""
    header = """# FlexiSync Data Configuration
#
# Objects are processed in the order listed. Import with --remove processes
# them in reverse order so dependent records are deleted first.
#
# Save operations:
#   - standard: native upsert/delete of the record platform
#   - bulk:     posts JSON save requests to bulk.rest_path
#   - <module>:<function> or <file.py>:<function>: a custom save operation
#
# Hooks map an event (preimport, preimportobject, postimportobject, postimport,
# preexport, preexportobject, postexportobject, postexport) to a list of
# <module>:<function> references.

"""
    return header + yaml.dump(DEFAULT_CONFIG, default_flow_style=False, sort_keys=False, allow_unicode=True)
