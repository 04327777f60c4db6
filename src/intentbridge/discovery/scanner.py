"""Action scanners — turn installed application bundles into ActionRecords.

The catalog only depends on the :class:`ActionScanner` protocol.
:class:`BundleScanner` is the production implementation: it walks the
application directories and reads each bundle's ``Info.plist`` plus its
App Intents metadata extract.
"""

from __future__ import annotations

import json
import logging
import os
import plistlib
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from intentbridge.discovery.models import ActionRecord, ParameterSpec

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

logger = logging.getLogger(__name__)

DEFAULT_APP_DIRECTORIES = (
    "/Applications",
    "/System/Applications",
    "~/Applications",
)

_INFO_PLIST = Path("Contents/Info.plist")
_ACTIONS_DATA = Path("Contents/Resources/Metadata.appintents/extract.actionsdata")
_CAMEL_BOUNDARY = re.compile(r"(?<=.)(?=[A-Z])")


@runtime_checkable
class ActionScanner(Protocol):
    """Produces raw action records. May block; callers run it off-loop."""

    def scan(self) -> Sequence[ActionRecord]: ...


class BundleScanner:
    """Scans ``*.app`` bundles under a set of application directories.

    Usage::

        scanner = BundleScanner(["/Applications"])
        records = scanner.scan()
    """

    def __init__(self, directories: Iterable[str] | None = None) -> None:
        dirs = directories if directories is not None else DEFAULT_APP_DIRECTORIES
        self.directories = [Path(d).expanduser() for d in dirs]

    def scan(self) -> list[ActionRecord]:
        """Scan every directory and return records in discovery order."""
        records: list[ActionRecord] = []
        for bundle in self._iter_bundles():
            try:
                records.extend(self.scan_bundle(bundle))
            except (OSError, ValueError) as exc:
                logger.debug("Skipping unreadable bundle %s: %s", bundle, exc)
        logger.info("Scanned %d bundle directories, found %d actions", len(self.directories), len(records))
        return records

    def scan_bundle(self, bundle: Path) -> list[ActionRecord]:
        """Return the actions declared by a single ``.app`` bundle."""
        info_path = bundle / _INFO_PLIST
        if not info_path.is_file():
            return []
        with info_path.open("rb") as fh:
            info: Any = plistlib.load(fh)
        if not isinstance(info, dict):
            return []
        bundle_id = info.get("CFBundleIdentifier")
        if not isinstance(bundle_id, str):
            return []
        app_name = info.get("CFBundleName")
        if not isinstance(app_name, str):
            app_name = bundle.stem

        records = self._parse_actions_data(bundle / _ACTIONS_DATA, bundle_id, app_name)
        records.extend(self._legacy_intents(info, bundle_id, app_name))
        return records

    def _iter_bundles(self) -> Iterable[Path]:
        for directory in self.directories:
            if not directory.is_dir():
                continue
            for root, dirnames, _files in os.walk(directory):
                bundles = [d for d in dirnames if d.endswith(".app")]
                for name in bundles:
                    yield Path(root) / name
                # Never descend into bundles or hidden directories.
                dirnames[:] = [
                    d for d in dirnames if not d.endswith(".app") and not d.startswith(".")
                ]

    def _parse_actions_data(self, path: Path, bundle_id: str, app_name: str) -> list[ActionRecord]:
        if not path.is_file():
            return []
        data: Any = json.loads(path.read_bytes())
        actions = data.get("actions") if isinstance(data, dict) else None
        if not isinstance(actions, list):
            return []

        records: list[ActionRecord] = []
        for action in actions:
            if not isinstance(action, dict):
                continue
            identifier = action.get("identifier")
            title = _localized_key(action.get("title"))
            if not isinstance(identifier, str) or title is None:
                continue
            description_meta = action.get("descriptionMetadata")
            description = None
            if isinstance(description_meta, dict):
                description = _localized_key(description_meta.get("descriptionText"))
            returns = action.get("returnsValue")
            records.append(
                ActionRecord(
                    id=identifier,
                    owner_id=bundle_id,
                    name=title,
                    description=description or f"App Intent from {app_name}",
                    parameters=tuple(_parse_parameters(action.get("parameters"))),
                    returns_result=returns if isinstance(returns, bool) else False,
                )
            )
        return records

    @staticmethod
    def _legacy_intents(info: dict[str, Any], bundle_id: str, app_name: str) -> list[ActionRecord]:
        supported = info.get("INIntentsSupported")
        if not isinstance(supported, list):
            return []
        return [
            ActionRecord(
                id=f"{bundle_id}.{intent_name}",
                owner_id=bundle_id,
                name=split_camel_case(intent_name.replace("Intent", "")),
                description=f"Legacy SiriKit intent from {app_name}",
            )
            for intent_name in supported
            if isinstance(intent_name, str)
        ]


def split_camel_case(text: str) -> str:
    """``"SendMessage"`` -> ``"Send Message"``."""
    return _CAMEL_BOUNDARY.sub(" ", text)


def _localized_key(value: Any) -> str | None:
    if isinstance(value, dict):
        key = value.get("key")
        if isinstance(key, str):
            return key
    return None


def _parse_parameters(raw: Any) -> list[ParameterSpec]:
    if not isinstance(raw, list):
        return []
    params: list[ParameterSpec] = []
    for param in raw:
        if not isinstance(param, dict) or not isinstance(param.get("name"), str):
            continue
        value_type = param.get("valueType")
        optional = param.get("isOptional")
        params.append(
            ParameterSpec(
                name=param["name"],
                type=value_type if isinstance(value_type, str) else "unknown",
                required=not optional if isinstance(optional, bool) else True,
            )
        )
    return params
