"""Source module: Per-event primary generation."""

from betagun.source.generator import PrimaryGenerator, sample_disk_position

__all__ = ["PrimaryGenerator", "sample_disk_position"]
