from parallel_harness.artifacts.store import Artifact, ArtifactStore, FileArtifactStore

__all__ = ["Artifact", "ArtifactStore", "FileArtifactStore"]
