"""Face Recognition HTTP API.

Start with: python -m lbp_face api --port 8000

Endpoints:
    GET    /api/v1/health              - Health check
    GET    /api/v1/identities          - List trained identities
    POST   /api/v1/faces/upload        - Upload face images for a person and train
    POST   /api/v1/faces/recognize     - Recognize faces in an image
    POST   /api/v1/train               - Retrain from all submitted samples
    DELETE /api/v1/identities/{name}   - Remove an identity
"""

import logging
import math
from typing import List, Optional

import cv2
import numpy as np
from fastapi import APIRouter, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from . import __version__
from .exceptions import EmptyTrainingSetError
from .recognition import FaceRecognizer

logger = logging.getLogger(__name__)


# =============================================================================
# Pydantic Schemas
# =============================================================================

class HealthResponse(BaseModel):
    status: str
    version: str
    detection_backend: str
    threshold: float
    registered_identities: int


class IdentityInfo(BaseModel):
    name: str
    samples: int


class IdentityResponse(BaseModel):
    identities: List[IdentityInfo]
    total: int


class FaceUploadResponse(BaseModel):
    message: str
    person_name: str
    files_received: int
    faces_registered: int


class TrainResponse(BaseModel):
    identities: List[str]
    total: int


class FaceResult(BaseModel):
    x: int
    y: int
    width: int
    height: int
    label: str
    distance: Optional[float] = None


class RecognizeResponse(BaseModel):
    faces_detected: int
    threshold: float
    results: List[FaceResult]


def _decode_image(content: bytes) -> Optional[np.ndarray]:
    nparr = np.frombuffer(content, np.uint8)
    if nparr.size == 0:
        return None
    return cv2.imdecode(nparr, cv2.IMREAD_COLOR)


def _persist(recognizer: FaceRecognizer) -> None:
    if recognizer.store.database_path is not None:
        recognizer.store.save()


# =============================================================================
# API Routes
# =============================================================================

def create_app(recognizer: Optional[FaceRecognizer] = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        recognizer: Recognizer to serve (new in-memory one if None)
    """
    app = FastAPI(
        title="LBP Face Recognition API",
        description="Face enrollment and recognition with LBP histograms",
        version=__version__,
    )
    app.state.recognizer = recognizer or FaceRecognizer()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    router = APIRouter(prefix="/api/v1", tags=["faces"])

    def get_recognizer(request: Request) -> FaceRecognizer:
        return request.app.state.recognizer

    @router.get("/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """Health check endpoint."""
        recognizer = get_recognizer(request)
        return HealthResponse(
            status="healthy",
            version=__version__,
            detection_backend=recognizer.detector.backend_name,
            threshold=recognizer.threshold,
            registered_identities=len(recognizer.store),
        )

    @router.get("/identities", response_model=IdentityResponse)
    async def list_identities(request: Request):
        """Get list of all trained identities."""
        store = get_recognizer(request).store
        identities = [
            IdentityInfo(name=label, samples=store.sample_count(label))
            for label in store.labels()
        ]
        return IdentityResponse(identities=identities, total=len(identities))

    @router.post("/faces/upload", response_model=FaceUploadResponse)
    async def upload_faces(
        request: Request,
        person_name: str = Form(...),
        files: List[UploadFile] = File(...),
    ):
        """Upload face images for a person, then retrain."""
        recognizer = get_recognizer(request)
        person_name = person_name.strip()
        if not person_name:
            raise HTTPException(status_code=400, detail="person_name must not be empty")

        registered = 0
        for file in files:
            image = _decode_image(await file.read())
            if image is None:
                logger.warning(f"Skipping undecodable upload: {file.filename}")
                continue
            try:
                added = recognizer.register_face(person_name, image)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            if added:
                registered += 1

        if registered:
            recognizer.train()
            _persist(recognizer)

        return FaceUploadResponse(
            message=f"Registered {registered} face(s)",
            person_name=person_name,
            files_received=len(files),
            faces_registered=registered,
        )

    @router.post("/faces/recognize", response_model=RecognizeResponse)
    async def recognize_faces(
        request: Request,
        file: UploadFile = File(...),
        threshold: Optional[float] = Form(None, ge=0, allow_inf_nan=False),
    ):
        """Recognize faces in an uploaded image."""
        recognizer = get_recognizer(request)
        image = _decode_image(await file.read())
        if image is None:
            raise HTTPException(status_code=400, detail="Invalid image")

        threshold = recognizer.threshold if threshold is None else threshold
        matches = recognizer.recognize(image, threshold=threshold)

        results = []
        for match in matches:
            distance = match.result.distance
            results.append(FaceResult(
                **match.face.to_dict(),
                label=match.result.label,
                distance=round(distance, 6) if math.isfinite(distance) else None,
            ))

        return RecognizeResponse(
            faces_detected=len(results),
            threshold=threshold,
            results=results,
        )

    @router.post("/train", response_model=TrainResponse)
    async def train(request: Request):
        """Rebuild every identity centroid from the submitted samples."""
        recognizer = get_recognizer(request)
        try:
            labels = recognizer.train()
        except EmptyTrainingSetError as e:
            raise HTTPException(status_code=400, detail=str(e))
        _persist(recognizer)
        return TrainResponse(identities=labels, total=len(labels))

    @router.delete("/identities/{name}")
    async def remove_identity(request: Request, name: str):
        """Remove a trained identity."""
        recognizer = get_recognizer(request)
        if not recognizer.remove_identity(name):
            raise HTTPException(status_code=404, detail=f"Identity '{name}' not found")
        _persist(recognizer)
        return {"message": f"Removed identity: {name}"}

    app.include_router(router)

    # Root endpoint
    @app.get("/")
    async def root():
        return {
            "name": "LBP Face Recognition API",
            "version": __version__,
            "docs": "/docs",
        }

    return app
