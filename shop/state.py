"""In-memory shop state with optimistic writes to the remote store.

Every mutation follows the same protocol:

1. snapshot the affected lists
2. apply the change in memory (visible to readers immediately)
3. persist it remotely
4. on failure restore the snapshots verbatim and raise ``MutationError``

Mutations are serialized per entity type. Operations that cascade into
products (renames, deletes, resets) also hold the products lock, and product
writes hold the classification locks while they validate names. Locks are
always taken in ``_LOCK_ORDER`` so two cascades cannot deadlock.
"""

import copy
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence

from shop.config import BULK_MAX_WORKERS, SENTINEL_COLLECTION, SITE_CONFIG_ID
from shop.defaults import (
    default_categories,
    default_collections,
    default_materials,
    default_products,
    default_site_config,
)
from shop.exceptions import MutationError, NotFoundError, RemoteStoreError, ShopError, ValidationError
from shop.fallback import FallbackStore
from shop.logging_config import get_logger, log_store_event
from shop.models import Classification, Product, SiteConfig

__all__ = ["ShopStore", "BulkResult", "CLASSIFICATION_FIELDS"]

logger = get_logger("state")

# Classification list -> the Product attribute that references it
CLASSIFICATION_FIELDS = {
    "collections": "collection",
    "categories": "category",
    "materials": "material",
}

_LOCK_ORDER = ("collections", "categories", "materials", "products", "config")

# Product writes check classification names, so they hold those locks too
_PRODUCT_WRITE_LOCKS = ("collections", "categories", "materials", "products")

_SINGULAR = {"collections": "collection", "categories": "category", "materials": "material"}

_ERRORS = {
    "add_product": "Error al guardar el producto. Por favor intenta de nuevo.",
    "update_product": "Error al actualizar el producto. Por favor intenta de nuevo.",
    "delete_product": "Error al eliminar el producto. Por favor intenta de nuevo.",
    "add_collection": "Error al añadir la colección. Por favor intenta de nuevo.",
    "update_collection": "Error al actualizar la colección. Por favor intenta de nuevo.",
    "delete_collection": "Error al eliminar la colección. Por favor intenta de nuevo.",
    "add_category": "Error al añadir la categoría. Por favor intenta de nuevo.",
    "update_category": "Error al actualizar la categoría. Por favor intenta de nuevo.",
    "delete_category": "Error al eliminar la categoría. Por favor intenta de nuevo.",
    "add_material": "Error al añadir el material. Por favor intenta de nuevo.",
    "update_material": "Error al actualizar el material. Por favor intenta de nuevo.",
    "delete_material": "Error al eliminar el material. Por favor intenta de nuevo.",
    "update_site_config": "Error al actualizar la configuración. Por favor intenta de nuevo.",
    "reset_to_default": "Error al restablecer el sitio.",
}

# Sentinel used to express "delete every row" to PostgREST
_NO_MATCH = "__no_match__"

BULK_FIELDS = ("name", "category", "collection", "price", "description", "material", "image_url")


@dataclass
class BulkResult:
    """Outcome of a bulk product operation. Successes are never rolled back."""

    succeeded: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> Dict[str, Any]:
        return {"succeeded": list(self.succeeded), "failed": dict(self.failed), "ok": self.ok}


def _sort_collections(collections: List[Classification]) -> List[Classification]:
    """Sentinel first (added if missing), the rest by name."""
    rest = [c for c in collections if c.name != SENTINEL_COLLECTION]
    rest.sort(key=lambda c: c.name.casefold())
    sentinel = next(
        (c for c in collections if c.name == SENTINEL_COLLECTION),
        Classification(name=SENTINEL_COLLECTION),
    )
    return [sentinel] + rest


def _with_referenced(base: List[Classification], products: List[Product], attr: str) -> List[Classification]:
    """Add any name the products use but ``base`` lacks (offline snapshots only)."""
    names = [c.name for c in base]
    for product in products:
        value = getattr(product, attr)
        if value and value not in names:
            names.append(value)
            base.append(Classification(name=value))
    return sorted(base, key=lambda c: c.name.casefold())


class ShopStore:
    """Source of truth for products, classifications and site config.

    Create one per application, call ``load()`` before serving, and
    ``close()`` on shutdown.

    Args:
        remote: A ``RemoteStoreClient`` (or anything with the same
            select/insert/upsert/update/delete methods).
        fallback: Optional ``FallbackStore`` for offline startup.
        max_workers: Parallel remote calls for bulk operations.
    """

    def __init__(self, remote: Any, fallback: Optional[FallbackStore] = None, max_workers: int = BULK_MAX_WORKERS):
        self.remote = remote
        self.fallback = fallback
        self.max_workers = max(1, max_workers)
        self.initialized = False
        self.loaded_from: Optional[str] = None

        self._state_lock = threading.RLock()
        self._mutation_locks = {name: threading.Lock() for name in _LOCK_ORDER}
        self._state: Dict[str, Any] = {
            "products": [],
            "collections": [],
            "categories": [],
            "materials": [],
            "config": default_site_config(),
        }

    # ---------- LIFECYCLE ----------

    def load(self) -> None:
        """Load everything from the remote store, seeding empty tables.

        Falls back to the local snapshot (or built-in defaults) when the
        remote store cannot be read.
        """
        with self._locked(*_LOCK_ORDER):
            try:
                state = self._load_remote()
                source = "remote"
            except RemoteStoreError as e:
                logger.warning(f"Remote load failed, using local fallback: {e}")
                state = self._load_fallback()
                source = "fallback"

            with self._state_lock:
                self._state.update(state)
                self.initialized = True
                self.loaded_from = source

        if source == "remote":
            self._save_snapshot()

        log_store_event(
            "store_loaded",
            {
                "message": f"Store loaded from {source}",
                "source": source,
                "products": len(state["products"]),
                "collections": len(state["collections"]),
                "categories": len(state["categories"]),
                "materials": len(state["materials"]),
            },
        )
        dangling = self.check_consistency()
        if dangling:
            logger.warning(f"Loaded catalog has {len(dangling)} dangling references: {dangling[:5]}")

    def close(self) -> None:
        self.initialized = False
        close = getattr(self.remote, "close", None)
        if callable(close):
            close()

    def _fetch_classifications(self, kind: str) -> List[Classification]:
        rows = self.remote.select(kind, order="name")
        return [Classification.from_row(row) for row in rows]

    def _seed(self, table: str, rows: List[Dict[str, Any]], on_conflict: str) -> None:
        logger.info(f"Seeding empty table '{table}' with {len(rows)} default rows")
        self.remote.upsert(table, rows, on_conflict=on_conflict)

    def _load_remote(self) -> Dict[str, Any]:
        collections = self._fetch_classifications("collections")
        if not collections:
            collections = default_collections()
            self._seed("collections", [c.to_row() for c in collections], "name")
        collections = _sort_collections(collections)

        categories = self._fetch_classifications("categories")
        if not categories:
            categories = default_categories()
            self._seed("categories", [c.to_row() for c in categories], "name")

        materials = self._fetch_classifications("materials")
        if not materials:
            materials = default_materials()
            self._seed("materials", [m.to_row() for m in materials], "name")

        product_rows = self.remote.select("products", order="created_at", descending=True)
        products = [Product.from_row(row) for row in product_rows]
        if not products:
            products = default_products()
            self._seed("products", [p.to_row() for p in products], "id")

        config_rows = self.remote.select("site_config", filters={"id": SITE_CONFIG_ID}, limit=1)
        if config_rows:
            config = SiteConfig.from_row(config_rows[0])
        else:
            config = default_site_config()
            self._seed("site_config", [config.to_row()], "id")

        return {
            "products": products,
            "collections": collections,
            "categories": categories,
            "materials": materials,
            "config": config,
        }

    def _read_snapshot(self, key: str) -> Optional[Any]:
        if self.fallback is None:
            return None
        try:
            return self.fallback.read(key)
        except Exception:
            logger.exception(f"Could not read fallback snapshot '{key}'")
            return None

    def _load_fallback(self) -> Dict[str, Any]:
        products = default_products()
        stored = self._read_snapshot("products")
        if isinstance(stored, list):
            products = [Product.from_dict(item) for item in stored if isinstance(item, Mapping)]

        collections = default_collections()
        stored = self._read_snapshot("collections")
        if isinstance(stored, list):
            collections = [Classification.from_dict(item) for item in stored if isinstance(item, Mapping)]

        config = default_site_config()
        stored = self._read_snapshot("config")
        if isinstance(stored, Mapping):
            config = SiteConfig.from_dict(stored)

        log_store_event(
            "fallback_load",
            {"message": "Loaded catalog from local fallback", "has_snapshot": self.fallback is not None},
            level=logging.WARNING,
        )
        return {
            "products": products,
            "collections": _sort_collections(collections),
            "categories": _with_referenced(default_categories(), products, "category"),
            "materials": _with_referenced(default_materials(), products, "material"),
            "config": config,
        }

    def _save_snapshot(self) -> None:
        if self.fallback is None:
            return
        with self._state_lock:
            products = [p.to_dict() for p in self._state["products"]]
            collections = [c.to_dict() for c in self._state["collections"]]
            config = self._state["config"].to_dict()
        try:
            self.fallback.write("products", products)
            self.fallback.write("collections", collections)
            self.fallback.write("config", config)
        except Exception:
            logger.exception("Could not write fallback snapshot")

    # ---------- READS ----------

    @property
    def products(self) -> List[Product]:
        with self._state_lock:
            return copy.deepcopy(self._state["products"])

    @property
    def collections(self) -> List[Classification]:
        with self._state_lock:
            return copy.deepcopy(self._state["collections"])

    @property
    def categories(self) -> List[Classification]:
        with self._state_lock:
            return copy.deepcopy(self._state["categories"])

    @property
    def materials(self) -> List[Classification]:
        with self._state_lock:
            return copy.deepcopy(self._state["materials"])

    @property
    def site_config(self) -> SiteConfig:
        with self._state_lock:
            return copy.deepcopy(self._state["config"])

    def classifications(self, kind: str) -> List[Classification]:
        self._check_kind(kind)
        with self._state_lock:
            return copy.deepcopy(self._state[kind])

    def get_product(self, product_id: str) -> Optional[Product]:
        with self._state_lock:
            for product in self._state["products"]:
                if product.id == product_id:
                    return copy.deepcopy(product)
        return None

    def snapshot(self) -> Dict[str, Any]:
        """Whole state as plain dicts (JSON-serializable)."""
        with self._state_lock:
            return {
                "products": [p.to_dict() for p in self._state["products"]],
                "collections": [c.to_dict() for c in self._state["collections"]],
                "categories": [c.to_dict() for c in self._state["categories"]],
                "materials": [m.to_dict() for m in self._state["materials"]],
                "config": self._state["config"].to_dict(),
            }

    def check_consistency(self) -> List[str]:
        """List product references to classifications that do not exist."""
        problems = []
        with self._state_lock:
            known = {kind: self._names(kind) for kind in CLASSIFICATION_FIELDS}
            for product in self._state["products"]:
                for kind, attr in CLASSIFICATION_FIELDS.items():
                    value = getattr(product, attr)
                    if value not in known[kind]:
                        problems.append(f"{product.id}.{attr}={value!r}")
        return problems

    def _names(self, kind: str) -> List[str]:
        return [c.name for c in self._state[kind]]

    @staticmethod
    def _check_kind(kind: str) -> None:
        if kind not in CLASSIFICATION_FIELDS:
            raise ValueError(f"Unknown classification kind: {kind}")

    # ---------- MUTATION PROTOCOL ----------

    @contextmanager
    def _locked(self, *names: str) -> Iterator[None]:
        with ExitStack() as stack:
            for name in _LOCK_ORDER:
                if name in names:
                    stack.enter_context(self._mutation_locks[name])
            yield

    def _optimistic(
        self,
        action: str,
        affected: Sequence[str],
        apply: Callable[[], None],
        persist: Callable[[], None],
    ) -> None:
        """Apply ``apply`` locally, run ``persist``, roll back on remote failure.

        Raises:
            MutationError: If ``persist`` raised ``RemoteStoreError``. The
                in-memory state has already been restored.
        """
        with self._state_lock:
            saved = {key: copy.deepcopy(self._state[key]) for key in affected}
            apply()

        try:
            persist()
        except RemoteStoreError as e:
            with self._state_lock:
                self._state.update(saved)
            log_store_event(
                "mutation_rolled_back",
                {
                    "message": f"{action} failed, local state restored",
                    "action": action,
                    "error": str(e),
                    "status_code": e.status_code,
                    "detail": e.detail,
                },
                level=logging.ERROR,
            )
            raise MutationError(_ERRORS.get(action, "La operación ha fallado."), action=action) from e

        self._save_snapshot()
        log_store_event("mutation_committed", {"message": f"{action} saved", "action": action}, level=logging.DEBUG)

    # ---------- PRODUCTS ----------

    def _validate_product(self, product: Product) -> None:
        missing = [name for name in ("id", "name", "price") if not str(getattr(product, name) or "").strip()]
        if missing:
            raise ValidationError(f"Faltan campos obligatorios: {', '.join(missing)}")

        with self._state_lock:
            if product.collection == SENTINEL_COLLECTION or product.collection not in self._names("collections"):
                raise ValidationError(f"Colección desconocida: '{product.collection}'")
            if product.category not in self._names("categories"):
                raise ValidationError(f"Categoría desconocida: '{product.category}'")
            if product.material not in self._names("materials"):
                raise ValidationError(f"Material desconocido: '{product.material}'")

    def _index_of(self, product_id: str) -> Optional[int]:
        for i, product in enumerate(self._state["products"]):
            if product.id == product_id:
                return i
        return None

    def add_product(self, product: Product) -> None:
        """Append a new product. It moves to the front on the next load (newest first)."""
        record = copy.deepcopy(product)

        with self._locked(*_PRODUCT_WRITE_LOCKS):
            self._validate_product(record)
            with self._state_lock:
                if self._index_of(record.id) is not None:
                    raise ValidationError(f"Ya existe un producto con id '{record.id}'")

            self._optimistic(
                "add_product",
                ("products",),
                apply=lambda: self._state["products"].append(record),
                persist=lambda: self.remote.upsert("products", record.to_row(), on_conflict="id"),
            )

    def update_product(self, product: Product) -> None:
        """Replace the product with the same id (appended if it does not exist)."""
        record = copy.deepcopy(product)

        def apply() -> None:
            index = self._index_of(record.id)
            if index is None:
                self._state["products"].append(record)
            else:
                self._state["products"][index] = record

        with self._locked(*_PRODUCT_WRITE_LOCKS):
            self._validate_product(record)
            self._optimistic(
                "update_product",
                ("products",),
                apply=apply,
                persist=lambda: self.remote.upsert("products", record.to_row(), on_conflict="id"),
            )

    def delete_product(self, product_id: str) -> None:
        def apply() -> None:
            self._state["products"] = [p for p in self._state["products"] if p.id != product_id]

        with self._locked("products"):
            self._optimistic(
                "delete_product",
                ("products",),
                apply=apply,
                persist=lambda: self.remote.delete("products", filters={"id": product_id}),
            )

    # ---------- BULK PRODUCT OPERATIONS ----------

    def _validate_bulk_changes(self, changes: Mapping[str, Any]) -> Dict[str, str]:
        unknown = [key for key in changes if key not in BULK_FIELDS]
        if unknown:
            raise ValidationError(f"Campos no editables en bloque: {', '.join(unknown)}")
        if not changes:
            raise ValidationError("No hay cambios que aplicar")

        cleaned = {key: str(value if value is not None else "") for key, value in changes.items()}
        for key in ("name", "price"):
            if key in cleaned and not cleaned[key].strip():
                raise ValidationError(f"El campo '{key}' no puede estar vacío")

        with self._state_lock:
            for kind, attr in CLASSIFICATION_FIELDS.items():
                if attr not in cleaned:
                    continue
                value = cleaned[attr]
                if value not in self._names(kind) or (kind == "collections" and value == SENTINEL_COLLECTION):
                    raise ValidationError(f"Valor desconocido para '{attr}': '{value}'")
        return cleaned

    def _update_one(self, product_id: str, changes: Mapping[str, str]) -> None:
        with self._state_lock:
            index = self._index_of(product_id)
            if index is None:
                raise NotFoundError(f"Producto '{product_id}' no encontrado")
            previous = self._state["products"][index]
            updated = replace(previous, **changes)
            self._state["products"][index] = updated

        try:
            self.remote.upsert("products", updated.to_row(), on_conflict="id")
        except RemoteStoreError:
            with self._state_lock:
                index = self._index_of(product_id)
                if index is not None:
                    self._state["products"][index] = previous
            raise

    def _delete_one(self, product_id: str, ranks: Mapping[str, int]) -> None:
        """Delete one product; on failure put it back among its surviving neighbours.

        ``ranks`` is the product order when the bulk run started. Siblings
        may have been removed meanwhile, so the old index is not reliable.
        """
        with self._state_lock:
            index = self._index_of(product_id)
            if index is None:
                raise NotFoundError(f"Producto '{product_id}' no encontrado")
            previous = self._state["products"].pop(index)

        try:
            self.remote.delete("products", filters={"id": product_id})
        except RemoteStoreError:
            with self._state_lock:
                products = self._state["products"]
                rank = ranks.get(product_id, index)
                position = next(
                    (i for i, p in enumerate(products) if ranks.get(p.id, -1) > rank),
                    len(products),
                )
                products.insert(position, previous)
            raise

    def _run_bulk(
        self,
        action: str,
        ids: Sequence[str],
        prepare: Callable[[], Callable[[str], None]],
        locks: Sequence[str] = ("products",),
    ) -> BulkResult:
        """Run one worker per id in parallel while holding ``locks``.

        ``prepare`` runs under the locks (validation, order capture) and
        returns the per-item worker.
        """
        unique_ids = list(dict.fromkeys(ids))
        result = BulkResult()
        outcomes: Dict[str, Optional[str]] = {}

        with self._locked(*locks):
            worker = prepare()
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = {pool.submit(worker, pid): pid for pid in unique_ids}
                for future in as_completed(futures):
                    pid = futures[future]
                    try:
                        future.result()
                        outcomes[pid] = None
                    except ShopError as e:
                        outcomes[pid] = str(e)

        for pid in unique_ids:
            if outcomes.get(pid) is None:
                result.succeeded.append(pid)
            else:
                result.failed[pid] = outcomes[pid] or "error"

        if result.succeeded:
            self._save_snapshot()
        log_store_event(
            "bulk_operation",
            {
                "message": f"{action}: {len(result.succeeded)} ok, {len(result.failed)} failed",
                "action": action,
                "succeeded": result.succeeded,
                "failed": result.failed,
            },
            level=logging.WARNING if result.failed else logging.INFO,
        )
        return result

    def bulk_update_products(self, ids: Sequence[str], changes: Mapping[str, Any]) -> BulkResult:
        """Apply the same field changes to several products.

        One remote call per product, in parallel. A failed item is restored
        on its own; items that succeeded stay updated.
        """

        def prepare() -> Callable[[str], None]:
            cleaned = self._validate_bulk_changes(changes)
            return lambda pid: self._update_one(pid, cleaned)

        return self._run_bulk("bulk_update_products", ids, prepare, locks=_PRODUCT_WRITE_LOCKS)

    def bulk_delete_products(self, ids: Sequence[str]) -> BulkResult:
        def prepare() -> Callable[[str], None]:
            with self._state_lock:
                ranks = {p.id: i for i, p in enumerate(self._state["products"])}
            return lambda pid: self._delete_one(pid, ranks)

        return self._run_bulk("bulk_delete_products", ids, prepare)

    # ---------- CLASSIFICATIONS ----------

    def add_classification(self, kind: str, data: Classification) -> bool:
        """Append a collection/category/material.

        Returns:
            False if a record with that name already exists (nothing changes).
        """
        self._check_kind(kind)
        name = (data.name or "").strip()
        if not name:
            raise ValidationError("El nombre es obligatorio")
        record = Classification(name=name, description=data.description or "")

        with self._locked(kind):
            with self._state_lock:
                if name in self._names(kind):
                    return False

            self._optimistic(
                f"add_{_SINGULAR[kind]}",
                (kind,),
                apply=lambda: self._state[kind].append(record),
                persist=lambda: self.remote.insert(kind, record.to_row()),
            )
        return True

    def update_classification(self, kind: str, original_name: str, data: Classification) -> bool:
        """Replace a classification, cascading a rename into products.

        Returns:
            False for the sentinel collection (nothing changes).

        Raises:
            NotFoundError: If ``original_name`` does not exist.
            ValidationError: If the new name is blank or already taken.
        """
        self._check_kind(kind)
        if kind == "collections" and original_name == SENTINEL_COLLECTION:
            return False

        new_name = (data.name or "").strip()
        if not new_name:
            raise ValidationError("El nombre es obligatorio")
        if kind == "collections" and new_name == SENTINEL_COLLECTION:
            raise ValidationError(f"'{SENTINEL_COLLECTION}' es un nombre reservado")

        record = Classification(name=new_name, description=data.description or "")
        attr = CLASSIFICATION_FIELDS[kind]
        renamed = new_name != original_name

        with self._locked(kind, "products"):
            with self._state_lock:
                names = self._names(kind)
                if original_name not in names:
                    raise NotFoundError(f"'{original_name}' no existe")
                if renamed and new_name in names:
                    raise ValidationError(f"Ya existe '{new_name}'")
                index = names.index(original_name)

            def apply() -> None:
                self._state[kind][index] = record
                if renamed:
                    self._state["products"] = [
                        replace(p, **{attr: new_name}) if getattr(p, attr) == original_name else p
                        for p in self._state["products"]
                    ]

            def persist() -> None:
                if renamed:
                    self.remote.insert(kind, record.to_row())
                    self.remote.update("products", {attr: new_name}, {attr: original_name})
                    self.remote.delete(kind, filters={"name": original_name})
                else:
                    self.remote.update(kind, {"description": record.description}, {"name": original_name})

            self._optimistic(
                f"update_{_SINGULAR[kind]}",
                (kind, "products") if renamed else (kind,),
                apply=apply,
                persist=persist,
            )
        return True

    def delete_classification(self, kind: str, name: str) -> bool:
        """Remove a classification, reassigning its products.

        Products move to the first remaining entry (list order) that is not
        the sentinel. Returns False for the sentinel collection.

        Raises:
            NotFoundError: If ``name`` does not exist.
            ValidationError: If products still use it and nothing else exists.
        """
        self._check_kind(kind)
        if kind == "collections" and name == SENTINEL_COLLECTION:
            return False
        attr = CLASSIFICATION_FIELDS[kind]

        with self._locked(kind, "products"):
            with self._state_lock:
                names = self._names(kind)
                if name not in names:
                    raise NotFoundError(f"'{name}' no existe")
                replacement = next(
                    (n for n in names if n != name and n != SENTINEL_COLLECTION),
                    None,
                )
                in_use = any(getattr(p, attr) == name for p in self._state["products"])
                if in_use and replacement is None:
                    raise ValidationError(f"No se puede eliminar '{name}': no hay otra opción a la que mover sus productos")

            def apply() -> None:
                self._state[kind] = [c for c in self._state[kind] if c.name != name]
                if in_use:
                    self._state["products"] = [
                        replace(p, **{attr: replacement}) if getattr(p, attr) == name else p
                        for p in self._state["products"]
                    ]

            def persist() -> None:
                if replacement is not None:
                    self.remote.update("products", {attr: replacement}, {attr: name})
                self.remote.delete(kind, filters={"name": name})

            self._optimistic(
                f"delete_{_SINGULAR[kind]}",
                (kind, "products"),
                apply=apply,
                persist=persist,
            )
        return True

    def add_collection(self, data: Classification) -> bool:
        return self.add_classification("collections", data)

    def update_collection(self, original_name: str, data: Classification) -> bool:
        return self.update_classification("collections", original_name, data)

    def delete_collection(self, name: str) -> bool:
        return self.delete_classification("collections", name)

    def add_category(self, data: Classification) -> bool:
        return self.add_classification("categories", data)

    def update_category(self, original_name: str, data: Classification) -> bool:
        return self.update_classification("categories", original_name, data)

    def delete_category(self, name: str) -> bool:
        return self.delete_classification("categories", name)

    def add_material(self, data: Classification) -> bool:
        return self.add_classification("materials", data)

    def update_material(self, original_name: str, data: Classification) -> bool:
        return self.update_classification("materials", original_name, data)

    def delete_material(self, name: str) -> bool:
        return self.delete_classification("materials", name)

    # ---------- SITE CONFIG ----------

    def update_site_config(self, config: SiteConfig) -> None:
        if not (config.site_name or "").strip():
            raise ValidationError("El nombre del sitio es obligatorio")
        for link in config.social_links:
            if not isinstance(link.platform, str) or not isinstance(link.url, str):
                raise ValidationError("Los enlaces sociales necesitan plataforma y url")
        record = copy.deepcopy(config)

        def apply() -> None:
            self._state["config"] = record

        with self._locked("config"):
            self._optimistic(
                "update_site_config",
                ("config",),
                apply=apply,
                persist=lambda: self.remote.upsert("site_config", record.to_row(), on_conflict="id"),
            )

    # ---------- RESET ----------

    def reset_to_default(self, confirm: bool = False) -> bool:
        """Wipe the remote catalog, reseed the defaults and reload.

        Nothing happens unless ``confirm`` is true.
        """
        if not confirm:
            return False

        defaults = {
            "products": default_products(),
            "collections": default_collections(),
            "categories": default_categories(),
            "materials": default_materials(),
            "config": default_site_config(),
        }

        def apply() -> None:
            self._state.update(copy.deepcopy(defaults))

        def persist() -> None:
            # products first so classification deletes never orphan anything
            self.remote.delete("products", exclude={"id": _NO_MATCH})
            for kind in CLASSIFICATION_FIELDS:
                self.remote.delete(kind, exclude={"name": _NO_MATCH})
            for kind in CLASSIFICATION_FIELDS:
                self.remote.upsert(kind, [c.to_row() for c in defaults[kind]], on_conflict="name")
            self.remote.upsert("products", [p.to_row() for p in defaults["products"]], on_conflict="id")
            self.remote.upsert("site_config", defaults["config"].to_row(), on_conflict="id")

        with self._locked(*_LOCK_ORDER):
            self._optimistic("reset_to_default", tuple(defaults), apply=apply, persist=persist)

        logger.info("Catalog reset to defaults, reloading")
        self.load()
        return True
