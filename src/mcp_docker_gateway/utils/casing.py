"""Key casing translation from engine wire names to lower camel case."""

from typing import Any

# Values under these keys are user data; their keys are never renamed
OPAQUE_KEYS = frozenset({"Labels", "Options", "DriverOpts", "Sysctls", "StorageOpt", "Tmpfs"})

# Maps keyed by user-chosen names, IDs, ports or paths: keys kept, values camelized
KEYED_MAPS = frozenset(
    {
        "Networks",
        "EndpointsConfig",
        "Containers",
        "Ports",
        "ExposedPorts",
        "PortBindings",
        "Volumes",
        "Runtimes",
        "IndexConfigs",
    }
)


def camelize_key(key: str) -> str:
    """Translate one engine field name to lower camel case.

    ``Id`` -> ``id``, ``ID`` -> ``id``, ``IPAMConfig`` -> ``ipamConfig``,
    ``IPv4Address`` -> ``ipv4Address``, ``ContainerID`` -> ``containerID``.
    Keys that do not start with an uppercase letter are returned unchanged.
    """
    if not key or not key[0].isupper():
        return key

    run = 0
    while run < len(key) and key[run].isupper():
        run += 1
    if run == len(key):
        return key.lower()
    if run > 1:
        rest = key[run:]
        version_suffix = rest[0] == "v" and rest[1:2].isdigit()
        if rest[0].islower() and not version_suffix:
            # Last capital starts the next word: IPAMConfig -> ipam + Config
            run -= 1
    return key[:run].lower() + key[run:]


def camelize_keys(value: Any) -> Any:
    """Recursively camelize mapping keys, leaving user-data maps untouched."""
    if isinstance(value, dict):
        result: dict[str, Any] = {}
        for key, item in value.items():
            if key in OPAQUE_KEYS:
                result[camelize_key(key)] = item if item is not None else {}
            elif key in KEYED_MAPS and isinstance(item, dict):
                result[camelize_key(key)] = {
                    name: camelize_keys(entry) for name, entry in item.items()
                }
            else:
                result[camelize_key(key)] = camelize_keys(item)
        return result
    if isinstance(value, list):
        return [camelize_keys(item) for item in value]
    return value
