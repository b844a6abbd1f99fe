"""Static table of the collections that take part in export/import.

Declaration order is also a valid processing order: every collection is
declared after everything it depends on. ``order_collections`` still sorts
topologically so callers can pass any subset in any order.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ForeignKey:
    field: str
    target: str
    # Required keys must be present; optional ones are checked only when set.
    required: bool = False

    @property
    def label(self) -> str:
        """``clientId`` -> ``client``; used in "client not found" messages."""
        return self.field[:-2] if self.field.endswith("Id") else self.field


@dataclass(frozen=True, slots=True)
class CollectionDescriptor:
    name: str
    group: str
    depends_on: tuple[str, ...] = ()
    references: tuple[ForeignKey, ...] = ()
    append_only: bool = False
    protectable: bool = False
    credential_fields: tuple[str, ...] = ()


COLLECTIONS: tuple[CollectionDescriptor, ...] = (
    CollectionDescriptor(name="clients", group="clients"),
    CollectionDescriptor(name="users", group="users", credential_fields=("passwordHash",)),
    CollectionDescriptor(name="categories", group="library"),
    CollectionDescriptor(
        name="subcategories",
        group="library",
        depends_on=("categories",),
        references=(ForeignKey("categoryId", "categories"),),
    ),
    CollectionDescriptor(
        name="articles",
        group="library",
        depends_on=("subcategories",),
        references=(ForeignKey("subcategoryId", "subcategories"),),
    ),
    CollectionDescriptor(
        name="articleVersions",
        group="library",
        depends_on=("articles",),
        references=(ForeignKey("articleId", "articles"),),
    ),
    CollectionDescriptor(
        name="kits",
        group="library",
        depends_on=("subcategories",),
        references=(ForeignKey("subcategoryId", "subcategories"),),
    ),
    CollectionDescriptor(
        name="kitVersions",
        group="library",
        # Kit components point at article versions.
        depends_on=("kits", "articleVersions"),
        references=(ForeignKey("kitId", "kits"),),
    ),
    CollectionDescriptor(name="templates", group="library"),
    CollectionDescriptor(
        name="templateVersions",
        group="library",
        depends_on=("templates",),
        references=(ForeignKey("templateId", "templates"),),
    ),
    CollectionDescriptor(name="procedures", group="library"),
    CollectionDescriptor(
        name="procedureVersions",
        group="library",
        depends_on=("procedures",),
        references=(ForeignKey("procedureId", "procedures"),),
    ),
    CollectionDescriptor(name="boatModels", group="library"),
    CollectionDescriptor(
        name="boatModelVersions",
        group="library",
        depends_on=("boatModels",),
        references=(ForeignKey("modelId", "boatModels"),),
    ),
    CollectionDescriptor(name="equipmentItems", group="library"),
    CollectionDescriptor(name="productionProcedures", group="library"),
    CollectionDescriptor(
        name="productionProcedureVersions",
        group="library",
        depends_on=("productionProcedures",),
        references=(ForeignKey("procedureId", "productionProcedures"),),
    ),
    CollectionDescriptor(
        name="projects",
        group="projects",
        # Library pins reference model, template and procedure versions.
        depends_on=(
            "clients",
            "boatModelVersions",
            "templateVersions",
            "procedureVersions",
            "equipmentItems",
        ),
        references=(ForeignKey("clientId", "clients", required=True),),
        protectable=True,
    ),
    CollectionDescriptor(
        name="timesheets",
        group="timesheets",
        # userId/userName are a denormalised stamp; the user may be absent here.
        depends_on=("projects",),
        references=(ForeignKey("projectId", "projects", required=True),),
    ),
    CollectionDescriptor(name="auditEntries", group="auditLog", append_only=True),
)

_BY_NAME: dict[str, CollectionDescriptor] = {d.name: d for d in COLLECTIONS}
_POSITION: dict[str, int] = {d.name: i for i, d in enumerate(COLLECTIONS)}

COLLECTION_NAMES: tuple[str, ...] = tuple(d.name for d in COLLECTIONS)


def get_descriptor(name: str) -> CollectionDescriptor:
    try:
        return _BY_NAME[name]
    except KeyError:
        raise KeyError(f"unknown collection: {name}") from None


def is_known(name: str) -> bool:
    return name in _BY_NAME


def collections_for_group(group: str) -> list[CollectionDescriptor]:
    return [d for d in COLLECTIONS if d.group == group]


def order_collections(names: Iterable[str]) -> list[str]:
    """Sort ``names`` so every dependency precedes its dependents.

    Dependencies outside ``names`` are ignored for ordering. Among collections
    whose dependencies are satisfied, declaration order wins.
    """
    requested = {get_descriptor(n).name for n in names}
    remaining = sorted(requested, key=_POSITION.__getitem__)
    ordered: list[str] = []
    placed: set[str] = set()

    while remaining:
        for name in remaining:
            pending = [
                dep for dep in _BY_NAME[name].depends_on if dep in requested and dep not in placed
            ]
            if not pending:
                ordered.append(name)
                placed.add(name)
                remaining.remove(name)
                break
        else:  # pragma: no cover - the declared graph is acyclic
            raise ValueError(f"dependency cycle among collections: {remaining}")

    return ordered


__all__ = [
    "COLLECTIONS",
    "COLLECTION_NAMES",
    "CollectionDescriptor",
    "ForeignKey",
    "collections_for_group",
    "get_descriptor",
    "is_known",
    "order_collections",
]
