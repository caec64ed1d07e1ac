"""Patches for known defects of the Firefox schemas.

The schemas are written for Chrome-style callbacks and miss a few things
Firefox actually provides; ``firefox_customizations()`` records the fixes
applied before compilation.
"""

from __future__ import annotations

from typing import Any

from .codegen.customize import CustomizationLog

# Events whose message parameter is required and whose sendResponse takes an argument
MESSAGE_EVENTS = [
    ("runtime", "events", "onMessage"),
    ("runtime", "events", "onMessageExternal"),
    ("extension", "events", "onRequest"),
    ("extension", "events", "onRequestExternal"),
]

# webRequest events that may return a BlockingResponse
BLOCKING_EVENTS = [
    ("webRequest", "events", "onAuthRequired"),
    ("webRequest", "events", "onBeforeRequest"),
    ("webRequest", "events", "onBeforeSendHeaders"),
    ("webRequest", "events", "onHeadersReceived"),
]

FIND_RESULT = (
    "{\ncount: number;\nrangeData?: Array<{\nframePos: number;\nstartTextNodePos: number;\n"
    "endTextNodePos: number;\nstartOffset: number;\nendOffset: number;\n}>;\n"
    "rectData?: Array<{\nrectsAndTexts: {\nrectList: Array<{\ntop: number;\nleft: number;\n"
    "bottom: number;\nright: number;\n}>;\ntextList: string[];\n};\ntextList: string;\n}>;\n}"
)

MODULE_SLOTS = (
    "{\nname: string;\ntoken?: {\nname: string;\nmanufacturer: string;\nHWVersion: string;\n"
    "FWVersion: string;\nserial: string;\nisLoggedIn: string;\n};\n}"
)

# Functions Firefox promisifies although the schemas do not say so.
# None means the function returns nothing at all.
PROMISE_RETURNS: dict[str, list[tuple[str, str | None]]] = {
    "clipboard": [("setImageData", "void")],
    "contextualIdentities": [
        ("create", "ContextualIdentity"),
        ("get", "ContextualIdentity"),
        ("query", "ContextualIdentity[]"),
        ("remove", "ContextualIdentity"),
        ("update", "ContextualIdentity"),
    ],
    "proxy": [("register", "void"), ("unregister", "void")],
    "theme": [("getCurrent", "_manifest.ThemeType"), ("reset", None), ("update", None)],
    "browserAction": [("openPopup", "void")],
    "find": [("find", FIND_RESULT), ("highlightResults", None), ("removeHighlighting", None)],
    "pageAction": [("setPopup", None), ("openPopup", "void")],
    "pkcs11": [
        ("getModuleSlots", MODULE_SLOTS),
        ("installModule", "void"),
        ("isModuleInstalled", "boolean"),
        ("uninstallModule", "void"),
    ],
    "sessions": [
        ("setTabValue", "void"),
        ("getTabValue", "string | object | undefined"),
        ("removeTabValue", "void"),
        ("setWindowValue", "void"),
        ("getWindowValue", "string | object | undefined"),
        ("removeWindowValue", "void"),
        ("forgetClosedTab", "void"),
        ("forgetClosedWindow", "void"),
        ("getRecentlyClosed", "Session[]"),
        ("restore", "Session"),
    ],
    "sidebarAction": [
        ("close", "void"),
        ("open", "void"),
        ("setPanel", "void"),
        ("setIcon", "void"),
        ("setTitle", "void"),
        ("getPanel", "string"),
        ("getTitle", "string"),
    ],
    "tabs": [
        ("discard", "void"),
        ("toggleReaderMode", "void"),
        ("show", "void"),
        ("hide", "number[]"),
    ],
}


def _return_manifest(func: dict[str, Any]) -> dict[str, Any]:
    func["returns"] = {"$ref": "manifest.WebExtensionManifest"}
    return func


def _native_manifest(type_: dict[str, Any]) -> dict[str, Any]:
    # Both choices would otherwise hoist the same _NativeManifestType
    type_["choices"][0]["properties"]["type"]["converterTypeOverride"] = '"pkcs11"| "stdio"'
    type_["choices"][1]["properties"]["type"]["converterTypeOverride"] = '"storage"'
    return type_


def _message_event(namespace: str):
    def edit(event: dict[str, Any]) -> dict[str, Any]:
        event["parameters"][0]["optional"] = False
        event["parameters"][2]["parameters"] = [
            {"name": "response", "type": "any", "optional": True}
        ]
        # The listener result is passed to sendResponse
        if namespace == "runtime":
            event["returns"]["converterTypeOverride"] = "boolean | Promise<any>"
        return event

    return edit


def _blocking_event(event: dict[str, Any]) -> dict[str, Any]:
    event["returns"]["converterTypeOverride"] = "BlockingResponse | Promise<BlockingResponse>"
    event["returns"]["optional"] = True
    return event


def _drop_callback_parameter(event: dict[str, Any]) -> dict[str, Any]:
    event["parameters"] = [p for p in event["parameters"] if p.get("name") != "callback"]
    return event


def _promise_return(return_type: str | None):
    def edit(func: dict[str, Any]) -> dict[str, Any]:
        if return_type is None:
            func["returns"] = {"converterTypeOverride": "void"}
        else:
            func["returns"] = {"converterTypeOverride": f"Promise<{return_type}>"}
        return func

    return edit


def _not_async(count: int):
    def edit(type_: dict[str, Any]) -> dict[str, Any]:
        for func in type_["functions"][:count]:
            func["async"] = False
        return type_

    return edit


def _port_post_message(port: dict[str, Any]) -> dict[str, Any]:
    port["properties"]["postMessage"]["parameters"] = [{"type": "object", "name": "message"}]
    return port


def firefox_customizations() -> CustomizationLog:
    """Build the patch set for the Firefox schemas."""
    log = CustomizationLog()

    # Not exposed to extensions
    log.remove_namespace("test")

    log.edit("runtime", "functions", "getManifest", _return_manifest)
    log.edit("_manifest", "types", "NativeManifest", _native_manifest)

    for path in MESSAGE_EVENTS:
        log.edit_path(path, _message_event(path[0]))

    for path in BLOCKING_EVENTS:
        log.edit_path(path, _blocking_event)
    log.edit("webRequest", "events", "onAuthRequired", _drop_callback_parameter)

    for namespace, functions in PROMISE_RETURNS.items():
        for name, return_type in functions:
            log.edit(namespace, "functions", name, _promise_return(return_type))

    # addListener, removeListener and hasListener return nothing
    log.edit("events", "types", "Event", _not_async(3))
    log.edit("devtools.panels", "types", "ElementsPanel", _not_async(1))

    # https://github.com/DefinitelyTyped/DefinitelyTyped/issues/24937
    log.remove("bookmarks", "functions", "import")
    log.remove("bookmarks", "functions", "export")
    log.remove("bookmarks", "events", "onImportBegan")
    log.remove("bookmarks", "events", "onImportEnded")

    # https://github.com/DefinitelyTyped/DefinitelyTyped/issues/23542
    log.edit("runtime", "types", "Port", _port_post_message)

    return log
