from __future__ import annotations
"""Read-only view of the module → sub-module → category tree."""
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class PermissionCategory:
    id: str
    sub_module_id: str
    name: str
    key: str
    type: str = ''


@dataclass(frozen=True)
class SubModule:
    id: str
    module_id: str
    name: str
    key: str
    categories: Tuple[PermissionCategory, ...] = ()


@dataclass(frozen=True)
class Module:
    id: str
    name: str
    key: str
    sub_modules: Tuple[SubModule, ...] = ()


@dataclass
class Catalog:
    modules: List[Module] = field(default_factory=list)

    def __post_init__(self):
        self._sub_modules: Dict[str, SubModule] = {}
        self._categories: Dict[str, PermissionCategory] = {}
        for mod in self.modules:
            for sm in mod.sub_modules:
                self._sub_modules[sm.id] = sm
                for cat in sm.categories:
                    self._categories[cat.id] = cat

    def sub_module(self, sub_module_id: str) -> Optional[SubModule]:
        return self._sub_modules.get(sub_module_id)

    def category(self, category_id: str) -> Optional[PermissionCategory]:
        return self._categories.get(category_id)

    def iter_pairs(self) -> Iterator[Tuple[Module, SubModule, PermissionCategory]]:
        """Every permissionable pair in display order."""
        for mod in self.modules:
            for sm in mod.sub_modules:
                for cat in sm.categories:
                    yield mod, sm, cat

    def contains_pair(self, sub_module_id: str, category_id: str) -> bool:
        cat = self._categories.get(category_id)
        return cat is not None and cat.sub_module_id == sub_module_id

    def find(self, sub_module_key: str, category_key: str) -> Optional[PermissionCategory]:
        for _, sm, cat in self.iter_pairs():
            if sm.key == sub_module_key and cat.key == category_key:
                return cat
        return None

    def __len__(self) -> int:
        return len(self._categories)
