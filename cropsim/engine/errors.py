class InvalidCropRequirements(ValueError):
    """Crop thresholds are missing or malformed; retrying will not help."""

    def __init__(self, message: str, crop: str | None = None):
        super().__init__(message)
        self.crop = crop
