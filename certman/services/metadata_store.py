"""DN and SAN side-file storage."""

import logging
import tomllib
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TypeVar

from pydantic import BaseModel

from certman.exceptions import MetadataParseError
from certman.models.san import SubjectAltNames
from certman.models.subject import DistinguishedName
from certman.services.toml_service import TOMLService

logger = logging.getLogger("certman")

DN_SUFFIX = ".dn.toml"
SAN_SUFFIX = ".san.toml"

T = TypeVar("T", bound=BaseModel)


class MetadataStore:
    """Reads and writes ``<name>.dn.toml`` and ``<name>.san.toml`` files.

    A save never clobbers a hand-edited side file: it is skipped when the
    file already holds an equal value, and when the file exists with a
    different value unless ``force`` is set.
    """

    def __init__(self, directory: Path):
        """
        Initialize metadata store.

        Args:
            directory: Directory holding the side files
        """
        self.directory = directory

    def dn_path(self, name: str) -> Path:
        return self.directory / f"{name}{DN_SUFFIX}"

    def san_path(self, name: str) -> Path:
        return self.directory / f"{name}{SAN_SUFFIX}"

    def load_dn(self, name: str) -> Optional[DistinguishedName]:
        """
        Load the distinguished name stored for a certificate.

        Args:
            name: Certificate name

        Returns:
            The stored DN, or None when no side file exists

        Raises:
            MetadataParseError: If the file is not valid TOML or not a valid DN
        """
        return self._load(self.dn_path(name), lambda data: DistinguishedName(**data))

    def save_dn(self, name: str, dn: DistinguishedName, force: bool = False) -> bool:
        """
        Store the distinguished name for a certificate.

        Returns:
            True if the file was written, False if the write was skipped
        """
        return self._save(self.dn_path(name), dn, dn.model_dump(), self.load_dn, name, force)

    def load_san(self, name: str) -> Optional[SubjectAltNames]:
        """
        Load the subject alternative names stored for a certificate.

        Args:
            name: Certificate name

        Returns:
            The stored SANs, or None when no side file exists

        Raises:
            MetadataParseError: If the file is not valid TOML or holds invalid names
        """
        return self._load(self.san_path(name), SubjectAltNames.from_toml_dict)

    def save_san(self, name: str, sans: SubjectAltNames, force: bool = False) -> bool:
        """
        Store the subject alternative names for a certificate.

        Returns:
            True if the file was written, False if the write was skipped
        """
        return self._save(self.san_path(name), sans, sans.to_toml_dict(), self.load_san, name, force)

    @staticmethod
    def _load(path: Path, build: Callable[[Dict[str, Any]], T]) -> Optional[T]:
        try:
            data = TOMLService.load_toml(path)
        except FileNotFoundError:
            return None
        except tomllib.TOMLDecodeError as e:
            raise MetadataParseError(f"can't parse {path}: {e}") from e

        try:
            return build(data)
        except (TypeError, ValueError) as e:
            raise MetadataParseError(f"invalid contents in {path}: {e}") from e

    @staticmethod
    def _save(
        path: Path,
        value: BaseModel,
        document: Dict[str, Any],
        load: Callable[[str], Optional[BaseModel]],
        name: str,
        force: bool,
    ) -> bool:
        if path.exists():
            try:
                current = load(name)
            except MetadataParseError:
                current = None
            if current == value:
                logger.debug(f"Side file unchanged, not rewriting: {path}")
                return False
            if not force:
                logger.debug(f"Side file exists and differs, keeping it (use --force to replace): {path}")
                return False

        TOMLService.save_toml(path, document)
        logger.info(f"Wrote {path}")
        return True
