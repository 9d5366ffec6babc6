"""
lolbuild/cache.py
File caches for scraped builds and rendered cards
"""

import hashlib
import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, Optional

from .constants import BUILD_CACHE_TTL, IMAGE_CACHE_MAX_AGE
from .models import BuildResult

logger = logging.getLogger("red.lolbuild.cache")


class BuildCache:
    """One JSON file per champion and role, valid for a TTL and one patch"""

    def __init__(self, cache_dir: Path, ttl: int = BUILD_CACHE_TTL):
        self.cache_dir = Path(cache_dir)
        self.ttl = ttl
        self.hits = 0
        self.misses = 0
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def make_key(slug: str, role: Optional[str] = None) -> str:
        return f"{slug}-{role}" if role else slug

    def _path(self, key: str) -> Path:
        return self.cache_dir / f"{key}.json"

    def load(self, key: str, version: str) -> Optional[BuildResult]:
        """Return the cached build only if fresh, non-empty and from this patch"""
        path = self._path(key)
        try:
            age = time.time() - path.stat().st_mtime
            with open(path, "r", encoding="utf-8") as f:
                entry = json.load(f)
        except FileNotFoundError:
            self.misses += 1
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"Unreadable cache file {path.name}: {e}")
            self.misses += 1
            return None

        if entry.get("version") != version:
            logger.info(f"Cache version mismatch for {key} ({entry.get('version')} != {version})")
            self.misses += 1
            return None
        if age >= self.ttl:
            logger.info(f"Cache expired for {key}")
            self.misses += 1
            return None

        build = BuildResult.from_dict(entry.get("build", {}))
        if build.items.is_empty():
            self.misses += 1
            return None

        self.hits += 1
        logger.info(f"Using cached build for {key} (v{version})")
        return build

    def save(self, key: str, version: str, build: BuildResult) -> bool:
        """Atomic write through a temporary file"""
        path = self._path(key)
        temp_path = path.with_suffix(".tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump({"version": version, "build": build.to_dict()}, f, indent=2)
            os.replace(temp_path, path)
            return True
        except OSError as e:
            logger.error(f"Failed to write cache file {path.name}: {e}")
            return False

    def clear(self) -> int:
        removed = 0
        for path in self.cache_dir.glob("*.json"):
            path.unlink(missing_ok=True)
            removed += 1
        self.hits = 0
        self.misses = 0
        return removed

    def get_stats(self) -> Dict[str, Any]:
        total = self.hits + self.misses
        hit_rate = (self.hits / total * 100) if total > 0 else 0
        return {
            "size": sum(1 for _ in self.cache_dir.glob("*.json")),
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": f"{hit_rate:.1f}%",
        }


class ImageCache:
    """Rendered build cards keyed by champion, role, patch and build content"""

    def __init__(self, cache_dir: Path, max_age: int = IMAGE_CACHE_MAX_AGE):
        self.cache_dir = Path(cache_dir)
        self.max_age = max_age
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def build_hash(build: BuildResult) -> str:
        """Digest of everything the card draws"""
        drawn = build.to_dict()
        for field in ("champion", "source", "error"):
            drawn.pop(field, None)
        payload = json.dumps(drawn, sort_keys=True)
        return hashlib.md5(payload.encode("utf-8")).hexdigest()

    def _path(self, champion: str, role: str, version: str, build: BuildResult) -> Path:
        return self.cache_dir / f"{champion}-{role}-{version}-{self.build_hash(build)}.png"

    def get(self, champion: str, role: str, version: str, build: BuildResult) -> Optional[bytes]:
        path = self._path(champion, role, version, build)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Unreadable cached image {path.name}: {e}")
            return None

    def save(self, champion: str, role: str, version: str, build: BuildResult, data: bytes):
        path = self._path(champion, role, version, build)
        try:
            path.write_bytes(data)
            logger.info(f"Cached image {path.name}")
        except OSError as e:
            logger.error(f"Failed to save cached image {path.name}: {e}")

    def clean_old(self, max_age: Optional[int] = None) -> int:
        """Delete cached cards older than max_age seconds"""
        max_age = self.max_age if max_age is None else max_age
        cutoff = time.time() - max_age
        cleaned = 0
        for path in self.cache_dir.glob("*.png"):
            try:
                if path.stat().st_mtime < cutoff:
                    path.unlink()
                    cleaned += 1
            except OSError as e:
                logger.warning(f"Could not remove {path.name}: {e}")
        if cleaned:
            logger.info(f"Cleaned {cleaned} old cached images")
        return cleaned

    def clear(self) -> int:
        return self.clean_old(max_age=-1)
