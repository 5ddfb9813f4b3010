"""recentdirs data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

PATH_SEP = "/"

# access time of entries that were never observed (e.g. id-resolved prefixes)
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class DirUsage:
    path: str
    access_time: datetime = EPOCH


@dataclass(frozen=True)
class DirUseEvent:
    path: str
    proc_id: Optional[int] = None


@dataclass(frozen=True)
class MatchOffset:
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length


@dataclass
class QueryMatch:
    dir: DirUsage
    offsets: list[MatchOffset] = field(default_factory=list)
    id: int = 0

    @property
    def path(self) -> str:
        return self.dir.path

    def component_prefix_matches(self) -> int:
        """Count the unique matched substrings which start a path component.

        For the query 'src':

            /foo/bar/src          => 1
            /foo/bar/baz-src      => 0
            /foo/bar/src/baz/src  => 1
        """
        path = self.dir.path
        segments = set()
        for offset in self.offsets:
            if offset.start > 0 and path[offset.start - 1] == PATH_SEP:
                segments.add(path[offset.start:offset.end])
        return len(segments)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "path": self.dir.path,
            "access_time": self.dir.access_time.isoformat(),
            "offsets": [{"start": o.start, "length": o.length} for o in self.offsets],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "QueryMatch":
        return cls(
            id=data.get("id", 0),
            dir=DirUsage(
                path=data["path"],
                access_time=datetime.fromisoformat(data["access_time"]),
            ),
            offsets=[MatchOffset(o["start"], o["length"]) for o in data.get("offsets", [])],
        )
