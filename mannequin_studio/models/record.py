"""History record of a finished generation."""

from datetime import datetime
from pathlib import Path
from pydantic import BaseModel, Field, computed_field

from .generation import GenerationOutcome, ModelOptions


_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


class GenerationRecord(BaseModel):
    """Snapshot handed to the history store after a successful generation."""
    
    record_id: str
    record_dir: Path
    
    # Inputs
    options: ModelOptions
    product_description: str = ""
    
    # Outputs
    caption: str
    image_files: list[Path] = Field(default_factory=list)
    poses: list[str] = Field(default_factory=list)
    failed_slots: list[int] = Field(default_factory=list)
    
    created_at: datetime = Field(default_factory=datetime.now)
    
    @computed_field
    @property
    def image_count(self) -> int:
        return len(self.image_files)
    
    @classmethod
    def from_outcome(
        cls,
        outcome: GenerationOutcome,
        options: ModelOptions,
        product_description: str,
        output_dir: Path,
    ) -> "GenerationRecord":
        """Write outcome images under a new timestamped directory."""
        record_id = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        record_dir = output_dir / record_id
        record_dir.mkdir(parents=True, exist_ok=True)
        
        image_files = []
        for image in outcome.images:
            suffix = _EXTENSIONS.get(image.mime_type, ".png")
            path = record_dir / f"pose_{image.slot}{suffix}"
            path.write_bytes(image.data)
            image_files.append(path)
        
        return cls(
            record_id=record_id,
            record_dir=record_dir,
            options=options,
            product_description=product_description,
            caption=outcome.caption,
            image_files=image_files,
            poses=[image.pose for image in outcome.images],
            failed_slots=sorted(outcome.failed_slots),
        )
    
    def save(self) -> Path:
        """Save record to JSON."""
        path = self.record_dir / "record.json"
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return path
