"""
Project configuration for the platform.
Roles are tagged with the project they belong to so the admin can group them.
"""

from typing import Dict, List, Optional

PROJECTS = [
    {"value": "wemeditate-web", "label": "WeMeditate Web"},
    {"value": "wemeditate-app", "label": "WeMeditate App"},
    {"value": "sahaj-atlas", "label": "Sahaj Atlas"},
]

# Label used when no project is selected (admin view)
ADMIN_PROJECT_LABEL = "All Content"


def get_project_label(value: Optional[str]) -> str:
    """Get project label by value"""
    if value is None:
        return ADMIN_PROJECT_LABEL
    for project in PROJECTS:
        if project["value"] == value:
            return project["label"]
    return value


def get_project_options() -> List[Dict[str, str]]:
    """Get project options for select inputs"""
    return [{"value": p["value"], "label": p["label"]} for p in PROJECTS]


def is_valid_project(value: Optional[str]) -> bool:
    """Validate project value (None means the admin view)"""
    return value is None or any(p["value"] == value for p in PROJECTS)
