"""In-memory gateway used when no backend URL is configured.

Mirrors the `GatewayClient` surface so the dashboard can be explored
offline. State changes (review, discard, delete) are visible to the live
feed on its next poll, just like the real backend.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import hashlib
import threading
import time
from typing import Any

from loguru import logger

from core.models import CATEGORIES, STATUS_PENDING, STATUS_REVIEWED, GalleryPage, PhotoRecord
from core.services.analytics import compute_analytics
from infrastructure.gateway_client import GatewayRejectedError
from infrastructure.photo_repository import record_from_payload

SAMPLE_IMAGES = [
    "https://images.unsplash.com/photo-1506905925346-21bda4d32df4?w=400&h=300&fit=crop",
    "https://images.unsplash.com/photo-1519681393784-d120267933ba?w=400&h=300&fit=crop",
    "https://images.unsplash.com/photo-1470071459604-3b5ec3a7fe05?w=400&h=300&fit=crop",
    "https://images.unsplash.com/photo-1441974231531-c6227db76b6e?w=400&h=300&fit=crop",
    "https://images.unsplash.com/photo-1518173946687-a243ed2a540f?w=400&h=300&fit=crop",
    "https://images.unsplash.com/photo-1574158622682-e40e69881006?w=400&h=300&fit=crop",
    "https://images.unsplash.com/photo-1495567720989-cebdbdd97913?w=400&h=300&fit=crop",
    "https://images.unsplash.com/photo-1493246507139-91e8fad9978e?w=400&h=300&fit=crop",
]

_REVIEWED_SAMPLES: list[dict[str, Any]] = [
    {"filename": "DSC00407.JPG", "score": 8.2, "category": "paisajes", "bestOf": True,
     "tags": "montaña, atardecer, cielo, nieve",
     "resumen": "Composición excelente con la línea del horizonte bien ubicada."},
    {"filename": "DSC00412.JPG", "score": 7.5, "category": "mascotas", "bestOf": True,
     "tags": "gato, bokeh, retrato, luz natural",
     "resumen": "Buen uso del bokeh para aislar al sujeto."},
    {"filename": "DSC00395.JPG", "score": 6.1, "category": "arquitectura", "bestOf": False,
     "tags": "edificio, líneas, urbano, geometría",
     "resumen": "Las líneas guía son interesantes pero la exposición está sobreexpuesta."},
    {"filename": "DSC00388.JPG", "score": 4.3, "category": "paisajes", "bestOf": False,
     "tags": "playa, agua, horizonte",
     "resumen": "Horizonte torcido y composición centrada sin punto de interés."},
    {"filename": "DSC00401.JPG", "score": 9.1, "category": "personas", "bestOf": True,
     "tags": "retrato, golden hour, expresión, contraste",
     "resumen": "Captura magistral de la expresión. Luz dorada increíble."},
    {"filename": "DSC00420.JPG", "score": 5.5, "category": "comida", "bestOf": False,
     "tags": "plato, cenital, colores",
     "resumen": "Composición cenital correcta pero falta profundidad en iluminación."},
]

_DEMO_COACHING: dict[str, Any] = {
    "resumen_nivel": "Intermedio con buen ojo para la luz natural.",
    "fortalezas": [
        {"titulo": "Luz dorada", "detalle": "Aprovechas bien la hora dorada.",
         "fotos_ejemplo": "DSC00401.JPG, DSC00407.JPG"},
        {"titulo": "Aislamiento del sujeto", "detalle": "El bokeh separa bien al sujeto.",
         "fotos_ejemplo": "DSC00412.JPG"},
    ],
    "debilidades": [
        {"titulo": "Horizontes torcidos", "detalle": "Nivela el horizonte antes de disparar.",
         "fotos_ejemplo": "DSC00388.JPG"},
    ],
    "patron_errores": "Sobreexposición en escenas urbanas con cielo brillante.",
    "mision_semanal": {
        "titulo": "Regla de tercios",
        "descripcion": "Coloca el horizonte en el tercio inferior o superior.",
        "ejercicio": "10 fotos de paisaje con la cuadrícula activada.",
        "settings_sugeridos": "f/8, ISO 100, 1/250s",
    },
    "sweet_spot": "Retratos con luz lateral al atardecer.",
    "proximo_objetivo": "Subir el promedio de paisajes por encima de 7.",
}

_TAG_POOL = ["luz natural", "composición", "color", "contraste", "textura", "retrato", "urbano"]


def _digest(name: str) -> int:
    return int(hashlib.sha1(name.encode("utf-8")).hexdigest(), 16)


def demo_score(filename: str) -> float:
    """Deterministic pseudo-score in [4.0, 9.4] for a filename."""
    return round(4.0 + (_digest(filename) % 55) / 10.0, 1)


class DemoGateway:
    """Thread-safe in-memory stand-in for `GatewayClient`."""

    def __init__(self, latency_s: float = 0.3, now: datetime | None = None) -> None:
        self._latency_s = float(latency_s)
        self._lock = threading.Lock()
        self._docs: dict[str, dict[str, Any]] = {}
        base = now or datetime(2026, 2, 23, 12, 0, tzinfo=timezone.utc)
        for i in range(8):
            name = f"DSC00{481 - i}.JPG"
            self._docs[name] = self._doc(name, STATUS_PENDING, base - timedelta(hours=6 * i), i)
        for i, sample in enumerate(_REVIEWED_SAMPLES):
            uploaded = base - timedelta(days=1, hours=8 * i)
            doc = self._doc(sample["filename"], STATUS_REVIEWED, uploaded, i)
            doc.update(sample)
            doc["reviewId"] = f"doc{i + 1}"
            self._docs[sample["filename"]] = doc

    @staticmethod
    def _doc(name: str, status: str, uploaded: datetime, index: int) -> dict[str, Any]:
        url = SAMPLE_IMAGES[index % len(SAMPLE_IMAGES)]
        return {
            "filename": name,
            "status": status,
            "uploadedAt": uploaded.isoformat(),
            "thumbUrl": url,
            "originalUrl": url.replace("w=400&h=300", "w=1200&h=900"),
            "rawUrl": "",
        }

    def _pause(self) -> None:
        if self._latency_s > 0:
            time.sleep(self._latency_s)

    def _records(self, status: str) -> list[PhotoRecord]:
        with self._lock:
            docs = [dict(d) for d in self._docs.values() if d["status"] == status]
        docs.sort(key=lambda d: d["uploadedAt"], reverse=True)
        return [record_from_payload(d, status) for d in docs]

    # Reads

    def fetch_gallery(
        self, page: int = 1, page_size: int = 200, tab: str | None = None
    ) -> GalleryPage:
        self._pause()
        start = max(0, (int(page) - 1) * int(page_size))
        end = start + int(page_size)
        pending = self._records(STATUS_PENDING) if tab in (None, STATUS_PENDING) else []
        reviewed_all = self._records(STATUS_REVIEWED) if tab in (None, STATUS_REVIEWED) else []
        return GalleryPage(
            pending=pending,
            reviewed=reviewed_all[start:end],
            reviewed_total=len(reviewed_all),
            reviewed_has_more=end < len(reviewed_all),
        )

    def fetch_detail(self, filename: str) -> dict[str, Any]:
        self._pause()
        with self._lock:
            doc = self._docs.get(filename)
            if doc is None:
                raise GatewayRejectedError(f"Not found: {filename}")
            return dict(doc)

    def fetch_analytics(self) -> dict[str, Any]:
        self._pause()
        return compute_analytics(self._records(STATUS_REVIEWED))

    def fetch_coaching(self) -> dict[str, Any]:
        self._pause()
        return dict(_DEMO_COACHING)

    # Mutations

    def review_photo(self, filename: str) -> dict[str, Any]:
        self._pause()
        with self._lock:
            doc = self._docs.get(filename)
            if doc is None or doc["status"] != STATUS_PENDING:
                raise GatewayRejectedError(f"Not pending: {filename}")
            score = demo_score(filename)
            h = _digest(filename)
            doc.update(
                {
                    "status": STATUS_REVIEWED,
                    "score": score,
                    "category": CATEGORIES[h % len(CATEGORIES)],
                    "tags": ", ".join(_TAG_POOL[(h >> k) % len(_TAG_POOL)] for k in (0, 3, 7)),
                    "bestOf": score >= 8.0,
                    "resumen": "Análisis de demostración.",
                    "reviewId": f"demo-{h % 10000}",
                }
            )
            logger.info("Demo review {} -> {}", filename, score)
            return dict(doc)

    def discard_photos(self, filenames: list[str]) -> dict[str, Any]:
        return self._remove(filenames, "discarded", STATUS_PENDING)

    def delete_photos(self, filenames: list[str]) -> dict[str, Any]:
        return self._remove(filenames, "deleted", STATUS_REVIEWED)

    def _remove(self, filenames: list[str], count_key: str, status: str) -> dict[str, Any]:
        self._pause()
        ok: list[str] = []
        with self._lock:
            for name in filenames:
                doc = self._docs.get(name)
                if doc is not None and doc["status"] == status:
                    del self._docs[name]
                    ok.append(name)
        return {count_key: len(ok), "errors": len(filenames) - len(ok), "details": {"ok": ok}}

    # Upload

    def request_upload_url(self, filename: str, kind: str) -> dict[str, Any]:
        raise GatewayRejectedError("Uploads are not available in demo mode")

    def complete_upload(self, filename: str, kind: str) -> dict[str, Any]:
        raise GatewayRejectedError("Uploads are not available in demo mode")
