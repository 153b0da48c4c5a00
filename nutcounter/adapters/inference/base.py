class InferenceAdapter:
    def infer(self, image_bytes: bytes, submission_id: str | None = None):
        """Return the provider's raw payload (dict/list) for one image."""
        raise NotImplementedError

    @property
    def mode(self) -> str:
        return "real"
