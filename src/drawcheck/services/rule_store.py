"""Rule set store - JSON rule sets on disk, one file per authority."""
import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from drawcheck.config import settings
from drawcheck.utils.logging import get_logger

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")


class RuleSetNotFoundError(FileNotFoundError):
    """Raised when no rule set exists for an authority."""

    def __init__(self, authority: str, path: Path):
        super().__init__(f"Rule set not found for authority {authority}: {path}")
        self.authority = authority
        self.path = path


def authority_slug(authority: Optional[str]) -> str:
    """Normalize an authority name into a file-safe slug (``"dlf west"`` -> ``"DLF_WEST"``)."""
    return _WHITESPACE.sub("_", str(authority or "UNKNOWN")).upper()


class RuleStore:
    """Reads and writes rule sets stored as ``<rules_dir>/<SLUG>.json``."""

    def __init__(self, rules_dir: Path):
        """Initialize store.

        Args:
            rules_dir: Directory holding the rule set files
        """
        self.rules_dir = Path(rules_dir)

    def path_for(self, authority: Optional[str]) -> Path:
        return self.rules_dir / f"{authority_slug(authority)}.json"

    def exists(self, authority: Optional[str]) -> bool:
        return self.path_for(authority).is_file()

    def list_authorities(self) -> List[str]:
        """List the authorities that have a stored rule set."""
        if not self.rules_dir.is_dir():
            return []
        return sorted(path.stem for path in self.rules_dir.glob("*.json"))

    def load(self, authority: Optional[str]) -> List[Dict[str, Any]]:
        """Load the rule set of an authority.

        Args:
            authority: Authority name or slug

        Returns:
            Rules as stored (plain mappings; malformed entries are left for
            the checker to report)

        Raises:
            RuleSetNotFoundError: If no rule set file exists
            ValueError: If the file is not a JSON array
        """
        path = self.path_for(authority)
        if not path.is_file():
            logger.warning("Rule set not found", authority=authority_slug(authority), path=str(path))
            raise RuleSetNotFoundError(authority_slug(authority), path)

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.error("Rule set is not valid JSON", path=str(path), error=str(e))
            raise ValueError(f"Invalid rule set file {path}: {e}") from e

        if not isinstance(data, list):
            raise ValueError(f"Rule set file {path} must contain a JSON array")

        logger.info("Rule set loaded", authority=authority_slug(authority), rule_count=len(data))
        return data

    def save(self, authority: Optional[str], rules: Sequence[Dict[str, Any]]) -> Path:
        """Write the rule set of an authority, replacing any previous one.

        Rules sharing an id keep only the first occurrence. The file is
        written to a temporary sibling and moved into place, so readers never
        see a partial rule set.

        Args:
            authority: Authority name or slug
            rules: Rules to persist

        Returns:
            Path of the written file
        """
        path = self.path_for(authority)
        path.parent.mkdir(parents=True, exist_ok=True)

        seen_ids = set()
        unique: List[Dict[str, Any]] = []
        for rule in rules:
            rule_id = str(rule.get("id") or "").strip()
            if rule_id and rule_id in seen_ids:
                logger.info("Dropping rule with duplicate id", rule_id=rule_id)
                continue
            if rule_id:
                seen_ids.add(rule_id)
            unique.append(rule)

        payload = json.dumps(unique, ensure_ascii=False, indent=2)
        fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info("Rule set saved", authority=authority_slug(authority), rule_count=len(unique), path=str(path))
        return path

    async def health_check(self) -> bool:
        """Check that the rules directory exists or can be created."""
        try:
            self.rules_dir.mkdir(parents=True, exist_ok=True)
            return os.access(self.rules_dir, os.R_OK | os.W_OK)
        except OSError as e:
            logger.error("Rule store health check failed", error=str(e))
            return False


# Global singleton instance
_rule_store: Optional[RuleStore] = None


def get_rule_store() -> RuleStore:
    """Get the global rule store instance.

    Returns:
        RuleStore rooted at the configured rules directory
    """
    global _rule_store
    if _rule_store is None:
        _rule_store = RuleStore(settings.rules_path)
    return _rule_store
