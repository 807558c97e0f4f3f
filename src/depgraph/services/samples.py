"""SampleService — write demonstration projects to disk.

Three kinds are available: a single JavaScript project, a single Python
project, and a five-project set with deliberate circular dependencies and
diverging version constraints. Files are overwritten on every run.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from depgraph.services.result import ServiceError, ServiceResult
from depgraph.services.telemetry import traced

logger = logging.getLogger(__name__)

JAVASCRIPT_SAMPLE: dict[str, Any] = {
    "name": "express-app",
    "version": "1.0.0",
    "description": "Sample Express.js application for dependency analysis",
    "main": "index.js",
    "scripts": {
        "start": "node index.js",
        "dev": "nodemon index.js",
        "test": "jest",
    },
    "dependencies": {
        "express": "^4.18.2",
        "body-parser": "^1.20.2",
        "cors": "^2.8.5",
        "dotenv": "^16.3.1",
        "mongoose": "^7.4.0",
        "jsonwebtoken": "^9.0.1",
        "bcrypt": "^5.1.0",
        "axios": "^1.4.0",
        "lodash": "^4.17.21",
        "moment": "^2.29.4",
    },
    "devDependencies": {
        "nodemon": "^3.0.1",
        "jest": "^29.6.1",
        "eslint": "^8.45.0",
        "prettier": "^3.0.0",
        "@types/node": "^20.4.2",
    },
}

PYTHON_SAMPLE = """\
# Web Framework
flask==2.3.0
werkzeug==2.3.0

# Database
sqlalchemy==2.0.15
psycopg2-binary==2.9.6

# Utilities
requests>=2.28.0
python-dotenv==1.0.0
click>=8.1.0

# Testing
pytest>=7.3.0
pytest-cov>=4.1.0

# Data Processing
pandas==2.0.2
numpy>=1.24.0

# API
flask-restful==0.3.10
flask-cors==4.0.0
"""

# authService -> userService -> paymentService -> authService (3-cycle)
# sharedUtils <-> dataAnalytics (direct cycle)
# express, lodash and axios are pinned differently across the set.
CIRCULAR_SAMPLES: tuple[dict[str, Any], ...] = (
    {
        "name": "authService",
        "version": "1.0.0",
        "dependencies": {
            "userService": "^1.0.0",
            "paymentService": "^1.0.0",
            "express": "^4.18.0",
            "lodash": "^4.17.21",
        },
    },
    {
        "name": "userService",
        "version": "1.0.0",
        "dependencies": {
            "paymentService": "^1.0.0",
            "express": "^4.17.0",
            "lodash": "^4.17.0",
        },
    },
    {
        "name": "paymentService",
        "version": "1.0.0",
        "dependencies": {
            "authService": "^1.0.0",
            "axios": "^1.0.0",
            "express": "^4.18.2",
        },
    },
    {
        "name": "sharedUtils",
        "version": "1.0.0",
        "dependencies": {
            "dataAnalytics": "^1.0.0",
            "lodash": "^4.16.0",
        },
    },
    {
        "name": "dataAnalytics",
        "version": "1.0.0",
        "dependencies": {
            "sharedUtils": "^1.0.0",
            "axios": "^0.27.0",
        },
    },
)

SAMPLE_KINDS = ("javascript", "python", "circular")


def _write_package_json(directory: Path, data: dict[str, Any]) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "package.json").write_text(json.dumps(data, indent=2), encoding="utf-8")
    return directory


class SampleService:
    """Create sample projects beneath *base_dir*."""

    def __init__(self, base_dir: str | Path = "sample_projects") -> None:
        self._base_dir = Path(base_dir)

    @traced
    def create(self, kind: str) -> ServiceResult:
        """Write the sample set *kind* and return the project paths.

        ``data["projects"]`` lists absolute directories in ingestion order.
        """
        writers = {
            "javascript": self._create_javascript,
            "python": self._create_python,
            "circular": self._create_circular,
        }
        writer = writers.get(kind)
        if writer is None:
            return ServiceResult(
                ok=False,
                op="sample",
                error=ServiceError(
                    code="INVALID_SAMPLE",
                    message=f"Unknown sample kind: {kind}",
                    detail={"kind": kind, "valid": list(SAMPLE_KINDS)},
                ),
            )

        paths = writer()
        for path in paths:
            logger.info("Created sample project at %s", path)
        return ServiceResult(
            ok=True,
            op="sample",
            data={"kind": kind, "projects": [str(p) for p in paths]},
        )

    def _create_javascript(self) -> list[Path]:
        target = (self._base_dir / "express_app").resolve()
        return [_write_package_json(target, JAVASCRIPT_SAMPLE)]

    def _create_python(self) -> list[Path]:
        target = (self._base_dir / "flask_app").resolve()
        target.mkdir(parents=True, exist_ok=True)
        (target / "requirements.txt").write_text(PYTHON_SAMPLE, encoding="utf-8")
        return [target]

    def _create_circular(self) -> list[Path]:
        company = (self._base_dir / "company_A").resolve()
        return [_write_package_json(company / data["name"], data) for data in CIRCULAR_SAMPLES]
