"""Built-in catalog of common site script verbs.

Used when no catalog file is configured. Covers the everyday verbs only; load a full catalog with
``SCRIPTLOOM_CATALOG_PATH`` for anything else.
"""

from __future__ import annotations

from typing import Any

from scriptloom.schema.catalog import SchemaCatalog

BUILTIN_CATALOG: dict[str, Any] = {
    "actions": [
        {
            "verb": "createSPList",
            "title": "Create a list",
            "description": "Creates a new list or library and applies the nested subactions to it.",
            "properties": {
                "listName": {"type": "string", "title": "List name"},
                "templateType": {"type": "number", "title": "Template type", "default": 100},
            },
            "required": ["listName", "templateType"],
            "subactions": [
                "setTitle",
                "setDescription",
                "addSPField",
                "deleteSPField",
                "addContentType",
                "addSPView",
            ],
        },
        {
            "verb": "applyTheme",
            "title": "Apply a theme",
            "properties": {"themeName": {"type": "string", "title": "Theme name"}},
            "required": ["themeName"],
        },
        {
            "verb": "setSiteLogo",
            "title": "Set the site logo",
            "properties": {"url": {"type": "string", "title": "Logo URL"}},
            "required": ["url"],
        },
        {
            "verb": "joinHubSite",
            "title": "Join a hub site",
            "properties": {
                "hubSiteId": {"type": "string", "title": "Hub site id"},
                "name": {"type": "string", "title": "Name"},
            },
            "required": ["hubSiteId"],
        },
        {
            "verb": "addNavLink",
            "title": "Add a navigation link",
            "properties": {
                "url": {"type": "string", "title": "URL"},
                "displayName": {"type": "string", "title": "Display name"},
                "isWebRelative": {"type": "boolean", "title": "Is web relative"},
                "navComponent": {
                    "type": "string",
                    "title": "Navigation component",
                    "enum": ["QuickLaunch", "Hub", "Footer"],
                },
            },
            "required": ["url", "displayName"],
        },
        {
            "verb": "triggerFlow",
            "title": "Trigger a flow",
            "properties": {
                "url": {"type": "string", "title": "Trigger URL"},
                "name": {"type": "string", "title": "Name"},
                "parameters": {"type": "object", "title": "Parameters"},
            },
            "required": ["url", "name"],
        },
        {
            "verb": "setRegionalSettings",
            "title": "Set regional settings",
            "properties": {
                "timeZone": {"type": "number", "title": "Time zone"},
                "locale": {"type": "number", "title": "Locale"},
                "sortOrder": {"type": "number", "title": "Sort order"},
                "hourFormat": {"type": "string", "title": "Hour format", "enum": ["12", "24"]},
            },
        },
        {
            "verb": "setSiteExternalSharingCapability",
            "title": "Set external sharing",
            "properties": {
                "capability": {
                    "type": "string",
                    "title": "Capability",
                    "enum": [
                        "Disabled",
                        "ExternalUserSharingOnly",
                        "ExternalUserAndGuestSharing",
                        "ExistingExternalUserSharingOnly",
                    ],
                }
            },
            "required": ["capability"],
        },
        {
            "verb": "createSiteColumn",
            "title": "Create a site column",
            "properties": {
                "fieldType": {"type": "string", "title": "Field type"},
                "internalName": {"type": "string", "title": "Internal name"},
                "displayName": {"type": "string", "title": "Display name"},
                "isRequired": {"type": "boolean", "title": "Is required"},
                "group": {"type": "string", "title": "Group"},
            },
            "required": ["fieldType", "internalName", "displayName"],
        },
        {
            "verb": "createContentType",
            "title": "Create a content type",
            "properties": {
                "name": {"type": "string", "title": "Name"},
                "description": {"type": "string", "title": "Description"},
                "parentName": {"type": "string", "title": "Parent name"},
                "id": {"type": "string", "title": "Id"},
                "hidden": {"type": "boolean", "title": "Hidden"},
                "group": {"type": "string", "title": "Group"},
            },
            "required": ["name"],
            "subactions": ["addSiteColumn", "removeSiteColumn"],
        },
        {
            "verb": "installSolution",
            "title": "Install a solution",
            "properties": {"id": {"type": "string", "title": "Solution id"}},
            "required": ["id"],
        },
    ],
    "subactions": [
        {
            "verb": "setTitle",
            "title": "Set title",
            "properties": {"title": {"type": "string", "title": "Title"}},
            "required": ["title"],
        },
        {
            "verb": "setDescription",
            "title": "Set description",
            "properties": {"description": {"type": "string", "title": "Description"}},
            "required": ["description"],
        },
        {
            "verb": "addSPField",
            "title": "Add a field",
            "properties": {
                "fieldType": {"type": "string", "title": "Field type"},
                "displayName": {"type": "string", "title": "Display name"},
                "internalName": {"type": "string", "title": "Internal name"},
                "isRequired": {"type": "boolean", "title": "Is required"},
                "addToDefaultView": {"type": "boolean", "title": "Add to default view"},
            },
            "required": ["fieldType", "displayName"],
        },
        {
            "verb": "deleteSPField",
            "title": "Delete a field",
            "properties": {"displayName": {"type": "string", "title": "Display name"}},
            "required": ["displayName"],
        },
        {
            "verb": "addContentType",
            "title": "Add a content type",
            "properties": {"name": {"type": "string", "title": "Name"}},
            "required": ["name"],
        },
        {
            "verb": "addSPView",
            "title": "Add a view",
            "properties": {
                "name": {"type": "string", "title": "Name"},
                "viewFields": {"type": "array", "title": "View fields"},
                "query": {"type": "string", "title": "Query"},
                "rowLimit": {"type": "number", "title": "Row limit"},
                "isPaged": {"type": "boolean", "title": "Is paged"},
                "makeDefault": {"type": "boolean", "title": "Make default"},
            },
            "required": ["name", "viewFields"],
        },
        {
            "verb": "addSiteColumn",
            "title": "Add a site column",
            "properties": {"internalName": {"type": "string", "title": "Internal name"}},
            "required": ["internalName"],
        },
        {
            "verb": "removeSiteColumn",
            "title": "Remove a site column",
            "properties": {"internalName": {"type": "string", "title": "Internal name"}},
            "required": ["internalName"],
        },
    ],
}


def builtin_catalog() -> SchemaCatalog:
    return SchemaCatalog.from_mapping(BUILTIN_CATALOG)
