#!/usr/bin/env python3
"""Command-line interface for LBP face recognition.

Usage:
    python -m lbp_face detect --image test.jpg
    python -m lbp_face register --name "Alice" --images path/to/images/
    python -m lbp_face recognize --image test.jpg
    python -m lbp_face list
    python -m lbp_face remove --name "Alice"
    python -m lbp_face api --port 8000

Examples:
    # Detect faces in an image
    python -m lbp_face detect --image photo.jpg --output result.jpg

    # Register a person's face (trains and saves the model store)
    python -m lbp_face register --name "Alice" --images ./alice_photos/

    # Register everyone under the watch list directory (one folder per person)
    python -m lbp_face register --watch-list data/raw/faces/watch_list

    # Recognize faces, drawing labelled boxes
    python -m lbp_face recognize --image photo.jpg --threshold 0.3 --output out.jpg

    # Start API server
    python -m lbp_face api --port 8000
"""

import argparse
import logging
import math
import sys
from pathlib import Path

import cv2

from .constants import get_api_config, get_config, get_storage_config
from .exceptions import EmptyTrainingSetError
from .recognition.recognizer import IMAGE_EXTENSIONS

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def _create_recognizer(args):
    from .recognition import FaceRecognizer, ModelStore

    store = ModelStore(database_path=args.database)
    return FaceRecognizer(store=store, threshold=getattr(args, "threshold", None))


def _load_image(path: str):
    image = cv2.imread(path)
    if image is None:
        logger.error(f"Could not load image: {path}")
        sys.exit(1)
    return image


def cmd_detect(args):
    """Detect faces in an image."""
    from .detection import FaceDetector

    detector = FaceDetector(backend=args.backend)
    logger.info(f"Using {args.backend} backend")

    image = _load_image(args.image)
    faces = detector.detect(image)
    logger.info(f"Found {len(faces)} face(s)")

    for i, face in enumerate(faces):
        x, y, w, h = face.bbox
        logger.info(f"  [{i+1}] pos=({x},{y}) size={w}x{h}")

    if args.output:
        output = detector.draw_detections(image, faces)
        cv2.imwrite(args.output, output)
        logger.info(f"Saved to: {args.output}")

    return 0


def cmd_register(args):
    """Register faces from images, then train and save the store."""
    recognizer = _create_recognizer(args)

    if args.watch_list:
        try:
            results = recognizer.register_from_directory(args.watch_list)
        except ValueError as e:
            logger.error(f"✗ {e}")
            return 1
        logger.info(f"Loaded {sum(results.values())} faces from {len(results)} identities")
    else:
        if not args.name:
            logger.error("--name is required with --images")
            return 1
        images_path = Path(args.images)
        if not images_path.exists():
            logger.error(f"Path not found: {images_path}")
            return 1

        if images_path.is_file():
            paths = [images_path]
        else:
            paths = sorted(images_path.glob("*"))
            paths = [p for p in paths if p.suffix.lower() in IMAGE_EXTENSIONS]

        try:
            count = recognizer.register_images(args.name, paths)
        except ValueError as e:
            logger.error(f"✗ Invalid name '{args.name}': {e}")
            return 1
        logger.info(f"Added {count} of {len(paths)} image(s) for {args.name}")

    try:
        trained = recognizer.train()
    except EmptyTrainingSetError as e:
        logger.error(f"✗ {e}")
        return 1

    recognizer.store.save()
    logger.info(f"✓ Training complete: {len(trained)} identities")
    return 0


def cmd_recognize(args):
    """Recognize faces in an image."""
    from .recognition import rank

    recognizer = _create_recognizer(args)
    if math.isnan(recognizer.threshold):
        logger.error("--threshold must be a number")
        return 1
    if len(recognizer.store) == 0:
        logger.warning("Model store is empty, every face will be Unknown")

    image = _load_image(args.image)
    matches = recognizer.recognize(image)
    logger.info(f"Recognition results ({len(matches)} faces, threshold {recognizer.threshold}):")

    for i, match in enumerate(matches):
        x, y, w, h = match.face.bbox
        distance = match.result.distance
        shown = f"{distance:.4f}" if math.isfinite(distance) else "n/a"
        logger.info(f"  [{i+1}] {match.result.label} (distance: {shown}) at ({x},{y}) {w}x{h}")

        if args.top > 1:
            histogram = recognizer.describe(image, match.face)
            for label, d in rank(histogram, recognizer.store)[:args.top]:
                logger.info(f"        {label}: {d:.4f}")

    if args.output:
        labels = [m.result.label for m in matches]
        output = recognizer.detector.draw_detections(image, [m.face for m in matches], labels=labels)
        cv2.imwrite(args.output, output)
        logger.info(f"Saved to: {args.output}")

    return 0


def cmd_list(args):
    """List trained identities."""
    from .recognition import ModelStore

    store = ModelStore(database_path=args.database)
    labels = store.labels()

    logger.info("Trained identities:")
    for label in labels:
        logger.info(f"  - {label}: {store.sample_count(label)} sample(s)")
    logger.info(f"Total: {len(labels)} identities")
    return 0


def cmd_remove(args):
    """Remove an identity and save the store."""
    from .recognition import ModelStore

    store = ModelStore(database_path=args.database)
    if not store.remove(args.name):
        logger.error(f"Identity '{args.name}' not found")
        return 1

    store.save()
    return 0


def cmd_api(args):
    """Start the face recognition API server."""
    import uvicorn

    from .api import create_app
    from .recognition import FaceRecognizer, ModelStore

    recognizer = FaceRecognizer(store=ModelStore(database_path=args.database))
    app = create_app(recognizer)

    logger.info("Starting Face Recognition API")
    logger.info(f"  URL: http://{args.host}:{args.port}")
    logger.info(f"  Docs: http://{args.host}:{args.port}/docs")

    uvicorn.run(app, host=args.host, port=args.port, log_level="warning")
    return 0


def build_parser() -> argparse.ArgumentParser:
    storage = get_storage_config()
    api = get_api_config()

    parser = argparse.ArgumentParser(
        prog="lbp-face",
        description="LBP Face Detection & Recognition",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  lbp-face detect --image photo.jpg
  lbp-face register --name "Alice" --images ./photos/
  lbp-face recognize --image photo.jpg --threshold 0.3
  lbp-face api --port 8000
        """
    )
    parser.add_argument("--config", help="Path to config YAML")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_database(sub):
        sub.add_argument("--database", "-d", default=storage.database_path,
                         help="Model store file (.npz)")

    # Detect command
    detect_parser = subparsers.add_parser("detect", help="Detect faces")
    detect_parser.add_argument("--image", "-i", required=True, help="Input image path")
    detect_parser.add_argument("--output", "-o", help="Output image path")
    detect_parser.add_argument("--backend", "-b", default="haar_cascade",
                               choices=["haar_cascade"], help="Detection backend")

    # Register command
    register_parser = subparsers.add_parser("register", help="Register and train faces")
    register_parser.add_argument("--name", "-n", help="Person's name")
    source = register_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--images", "-i", help="Image or directory of images")
    source.add_argument("--watch-list", nargs="?", const=storage.watch_list_dir,
                        help="Directory with one sub-folder of images per person")
    add_database(register_parser)

    # Recognize command
    recognize_parser = subparsers.add_parser("recognize", help="Recognize faces")
    recognize_parser.add_argument("--image", "-i", required=True, help="Input image path")
    recognize_parser.add_argument("--output", "-o", help="Output image path")
    recognize_parser.add_argument("--threshold", "-t", type=float, default=None,
                                  help="Rejection distance (default from config)")
    recognize_parser.add_argument("--top", type=int, default=1,
                                  help="Show the N closest identities per face")
    add_database(recognize_parser)

    # List command
    list_parser = subparsers.add_parser("list", help="List trained identities")
    add_database(list_parser)

    # Remove command
    remove_parser = subparsers.add_parser("remove", help="Remove an identity")
    remove_parser.add_argument("--name", "-n", required=True, help="Person's name")
    add_database(remove_parser)

    # API command
    api_parser = subparsers.add_parser("api", help="Start API server")
    api_parser.add_argument("--host", default=api.host, help="Host to bind to")
    api_parser.add_argument("--port", "-p", type=int, default=api.port, help="Port to bind to")
    add_database(api_parser)

    return parser


def main(argv=None):
    """Main entry point for the CLI."""
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config")
    known, _ = pre.parse_known_args(argv)
    if known.config:
        get_config().reload(Path(known.config))

    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.debug)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    # Route to command handler
    commands = {
        "detect": cmd_detect,
        "register": cmd_register,
        "recognize": cmd_recognize,
        "list": cmd_list,
        "remove": cmd_remove,
        "api": cmd_api,
    }

    handler = commands.get(args.command)
    if handler:
        result = handler(args)
        sys.exit(result if result else 0)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
