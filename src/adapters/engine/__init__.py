"""Engine backends (implementations of `core.interfaces.engine.EngineBackend`).

- `JarBackend`: the engine jar stored on disk, launched with java.
- `DockerBackend`: the engine image, launched with `docker run`.
"""

from adapters.engine.docker_backend import DockerBackend
from adapters.engine.jar_backend import JarBackend

__all__ = [
    "DockerBackend",
    "JarBackend",
]
