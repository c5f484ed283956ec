"""
ChromaDB-backed recipe search.

Recipes live in one collection.  The document of each record is a
lowercased searchable text (title, description, ingredients and tags)
so Chroma's case-sensitive ``$contains`` filter can serve keyword
search.  The recipe itself is kept as flat metadata (Chroma metadata
values must be scalars, so lists are JSON strings):

    title, description, difficulty, minutes,
    ingredients_json, steps_json, tags_json

Chroma's client is synchronous; every call, including resolving the
collection, runs in the default executor so the event loop is never
blocked.
"""

from __future__ import annotations

import asyncio
import functools
import json
import threading
from typing import Any, Mapping

import chromadb

from recipe_rag.core.config import settings
from recipe_rag.errors import BackendUnavailableError
from recipe_rag.schemas.retrieval import SearchResult
from recipe_rag.utils.logging import get_logger
from recipe_rag.utils.text import keyword_terms

logger = get_logger("recipe_rag.services.recipe_search")

_chroma_client_lock = threading.Lock()
_chroma_client_instance: Any | None = None

# Extra relevance per favourite tag a recipe carries.
_TAG_BOOST = 0.1

# Keyword field weights: a title hit counts three times an ingredient hit.
_FIELD_WEIGHTS = (("title", 3.0), ("description", 2.0), ("ingredients", 1.0), ("tags", 1.0))
_MAX_FIELD_WEIGHT = 3.0

# Keyword candidates fetched per requested result before scoring.
_KEYWORD_CANDIDATE_FACTOR = 5


def _get_chroma_client(persist_directory: str | None = None) -> Any:
    """Return a process-wide Chroma client (persistent when a path is configured)."""
    global _chroma_client_instance
    if _chroma_client_instance is not None:
        return _chroma_client_instance

    with _chroma_client_lock:
        if _chroma_client_instance is not None:
            return _chroma_client_instance

        path = persist_directory or settings.chroma_persist_directory
        chroma_settings = chromadb.Settings(anonymized_telemetry=False)
        if path:
            _chroma_client_instance = chromadb.PersistentClient(path=path, settings=chroma_settings)
        else:
            _chroma_client_instance = chromadb.EphemeralClient(settings=chroma_settings)
        logger.info("Chroma client initialized (persist_directory=%s)", path or "<memory>")
        return _chroma_client_instance


def _load_list(raw: Any) -> list[str]:
    if isinstance(raw, list):
        return [str(x) for x in raw]
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return [part.strip() for part in str(raw).split(",") if part.strip()]
    return [str(x) for x in value] if isinstance(value, list) else []


def _to_int(raw: Any, default: int) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def record_to_result(source_id: str, document: str | None, metadata: Mapping[str, Any] | None, score: float) -> SearchResult:
    """Convert one Chroma record into a SearchResult."""
    meta = metadata or {}
    return SearchResult(
        source_id=str(source_id),
        title=str(meta.get("title") or meta.get("name") or source_id),
        description=str(meta["description"] if "description" in meta else document or ""),
        relevance_score=max(0.0, min(1.0, float(score))),
        ingredients=_load_list(meta.get("ingredients_json")),
        steps=_load_list(meta.get("steps_json")),
        tags=_load_list(meta.get("tags_json")),
        difficulty=str(meta.get("difficulty") or "medium"),
        cooking_time=_to_int(meta.get("minutes"), 30),
    )


def distance_to_similarity(distance: float) -> float:
    return 1.0 / (1.0 + max(0.0, float(distance)))


def build_search_text(title: str, description: str, ingredients: list[str], tags: list[str]) -> str:
    """Lowercased text the keyword filter runs over."""
    parts = [title, description, " ".join(ingredients), " ".join(tags)]
    return " ".join(p for p in parts if p).lower()


def _keyword_score(terms: list[str], result: SearchResult) -> float:
    fields = {
        "title": result.title.lower(),
        "description": result.description.lower(),
        "ingredients": " ".join(result.ingredients).lower(),
        "tags": " ".join(result.tags).lower(),
    }
    total = 0.0
    for term in terms:
        total += max((w for name, w in _FIELD_WEIGHTS if term in fields[name]), default=0.0)
    return total / (_MAX_FIELD_WEIGHT * len(terms))


class ChromaRecipeSearch:
    """
    Vector, keyword and preference-biased search over one recipe collection.

    ``user_tags`` maps a user id to that user's favourite recipe tags;
    it drives personalized search.
    """

    def __init__(
        self,
        collection: Any | None = None,
        collection_name: str | None = None,
        user_tags: Mapping[str, list[str]] | None = None,
    ):
        self._collection = collection
        self.collection_name = collection_name or settings.chroma_collection
        self.user_tags: dict[str, list[str]] = dict(user_tags or {})

    def _get_collection(self) -> Any:
        # Blocking; only called from the executor.
        if self._collection is None:
            client = _get_chroma_client()
            self._collection = client.get_or_create_collection(self.collection_name)
        return self._collection

    def _call(self, method: str, kwargs: dict[str, Any]) -> Any:
        return getattr(self._get_collection(), method)(**kwargs)

    async def _run(self, method: str, /, **kwargs: Any) -> Any:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, functools.partial(self._call, method, kwargs))
        except Exception as e:
            raise BackendUnavailableError(f"Chroma {method} failed: {e}") from e

    # ── Indexing ────────────────────────────────────────────────────
    async def upsert_recipes(
        self,
        recipes: list[SearchResult],
        embeddings: list[list[float]] | None = None,
    ) -> None:
        """
        Write recipes into the collection.

        Without ``embeddings`` the collection's embedding function embeds
        the searchable text.
        """
        if not recipes:
            return
        kwargs: dict[str, Any] = {
            "ids": [r.source_id for r in recipes],
            "documents": [build_search_text(r.title, r.description, r.ingredients, r.tags) for r in recipes],
            "metadatas": [
                {
                    "title": r.title,
                    "description": r.description,
                    "difficulty": r.difficulty,
                    "minutes": r.cooking_time,
                    "ingredients_json": json.dumps(r.ingredients, ensure_ascii=False),
                    "steps_json": json.dumps(r.steps, ensure_ascii=False),
                    "tags_json": json.dumps(r.tags, ensure_ascii=False),
                }
                for r in recipes
            ],
        }
        if embeddings is not None:
            kwargs["embeddings"] = embeddings
        await self._run("upsert", **kwargs)
        logger.info("[SEARCH] upserted %d recipes into '%s'", len(recipes), self.collection_name)

    # ── Vector ──────────────────────────────────────────────────────
    async def vector_search(self, text: str, k: int) -> list[SearchResult]:
        raw = await self._run(
            "query",
            query_texts=[text],
            n_results=k,
            include=["documents", "metadatas", "distances"],
        )
        ids = (raw.get("ids") or [[]])[0]
        docs = (raw.get("documents") or [[]])[0] or [None] * len(ids)
        metas = (raw.get("metadatas") or [[]])[0] or [None] * len(ids)
        dists = (raw.get("distances") or [[]])[0] or [0.0] * len(ids)

        results = [
            record_to_result(sid, doc, meta, distance_to_similarity(dist))
            for sid, doc, meta, dist in zip(ids, docs, metas, dists)
        ]
        logger.debug("[SEARCH] vector '%s' -> %d", text[:40], len(results))
        return results

    # ── Keyword ─────────────────────────────────────────────────────
    async def keyword_search(self, text: str, k: int) -> list[SearchResult]:
        terms = keyword_terms(text)
        if not terms:
            return []

        clauses = [{"$contains": t} for t in terms]
        where_document = clauses[0] if len(clauses) == 1 else {"$or": clauses}
        raw = await self._run(
            "get",
            where_document=where_document,
            limit=k * _KEYWORD_CANDIDATE_FACTOR,
            include=["documents", "metadatas"],
        )
        ids = raw.get("ids") or []
        docs = raw.get("documents") or [None] * len(ids)
        metas = raw.get("metadatas") or [None] * len(ids)

        results: list[SearchResult] = []
        for sid, doc, meta in zip(ids, docs, metas):
            record = record_to_result(sid, doc, meta, 0.0)
            score = _keyword_score(terms, record)
            if score > 0:
                results.append(record.model_copy(update={"relevance_score": min(1.0, score)}))

        results.sort(key=lambda r: r.relevance_score, reverse=True)
        logger.debug("[SEARCH] keyword %s -> %d", terms, len(results))
        return results[:k]

    # ── Personalized ────────────────────────────────────────────────
    async def personalized_search(self, text: str, user_id: str, k: int) -> list[SearchResult]:
        favourites = [t.lower() for t in self.user_tags.get(user_id, [])]
        if not favourites:
            return []

        results = await self.vector_search(f"{text} {' '.join(favourites)}", k)
        boosted: list[SearchResult] = []
        for r in results:
            matched = sum(1 for tag in r.tags if tag.lower() in favourites)
            if not matched:
                continue
            score = min(1.0, r.relevance_score * (1.0 + _TAG_BOOST * matched))
            boosted.append(r.model_copy(update={"relevance_score": score, "personalized_score": score}))
        return boosted
