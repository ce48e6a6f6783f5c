# database/tables.py
from dataclasses import dataclass, fields, replace
from typing import Dict, Iterator, Mapping, Optional, Tuple

from config import TABLE_PREFIX


@dataclass(frozen=True)
class TableNames:
    """
    논리 테이블 이름 → 실제 테이블 이름 매핑.
    배포 환경마다 접두어(prefix)로 테이블을 분리할 수 있도록 한다.
    필드 순서 = 생성 순서.
    """
    forums: str
    topics: str
    posts: str
    profiles: str
    usergroups: str
    languages: str
    phrases: str
    likes: str
    views: str
    votes: str
    accesses: str
    subscribes: str
    visits: str
    activity: str
    post_revisions: str
    tags: str

    @classmethod
    def keys(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def with_prefix(cls, prefix: str = TABLE_PREFIX,
                    overrides: Optional[Mapping[str, str]] = None) -> "TableNames":
        names = {key: f"{prefix}{key}" for key in cls.keys()}
        if overrides:
            unknown = set(overrides) - set(names)
            if unknown:
                raise ValueError(f"unknown table keys: {', '.join(sorted(unknown))}")
            names.update(overrides)
        return cls(**names)

    def rename(self, **overrides: str) -> "TableNames":
        return replace(self, **overrides)

    def items(self) -> Iterator[Tuple[str, str]]:
        for key in self.keys():
            yield key, getattr(self, key)

    def as_dict(self) -> Dict[str, str]:
        return dict(self.items())
