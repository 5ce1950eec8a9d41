# role_config.py
"""
Built-in role definitions for managers and API clients.
Each role maps collection slugs to the operations it grants.
"""

MANAGER_ROLES = {
    "meditations-editor": {
        "label": "Meditations Editor",
        "description": "Can create and edit meditations, upload related images and files",
        "project": "wemeditate-app",
        "permissions": {
            "meditations": ["read", "create", "update"],
            "images": ["read", "create"],
            "files": ["read", "create"],
        },
    },
    "path-editor": {
        "label": "Path Editor",
        "description": "Can edit lessons and external videos, upload related images and files",
        "project": "wemeditate-app",
        "permissions": {
            "lessons": ["read", "update"],
            "external-videos": ["read", "update"],
            "images": ["read", "create"],
            "files": ["read", "create"],
        },
    },
    "translator": {
        "label": "Translator",
        "description": "Can edit localized fields in pages and music",
        "project": "wemeditate-web",
        "permissions": {
            "pages": ["read", "translate"],
            "music": ["read", "translate"],
        },
    },
}

CLIENT_ROLES = {
    "we-meditate-web": {
        "label": "We Meditate Web",
        "description": "Access for We Meditate web frontend application",
        "permissions": {
            "we-meditate-web-settings": ["read"],
            "meditations": ["read"],
            "frames": ["read"],
            "narrators": ["read"],
            "images": ["read"],
            "files": ["read"],
            "pages": ["read"],
            "music": ["read"],
            "forms": ["read"],
            "authors": ["read"],
            "meditation-tags": ["read"],
            "page-tags": ["read"],
            "music-tags": ["read"],
            "form-submissions": ["create"],
        },
    },
    "we-meditate-app": {
        "label": "We Meditate App",
        "description": "Access for We Meditate mobile application",
        "permissions": {
            "we-meditate-app-settings": ["read"],
            "meditations": ["read"],
            "frames": ["read"],
            "narrators": ["read"],
            "lessons": ["read"],
            "external-videos": ["read"],
            "music": ["read"],
            "images": ["read"],
            "files": ["read"],
            "meditation-tags": ["read"],
            "page-tags": ["read"],
            "music-tags": ["read"],
        },
    },
    "sahaj-atlas": {
        "label": "Sahaj Atlas",
        "description": "Access for Sahaj Atlas application",
        "permissions": {
            "sahaj-atlas-settings": ["read"],
            "images": ["read"],
            "files": ["read"],
        },
    },
}
