import time
from nutcounter.orchestrator.contracts import TallyResult
from nutcounter.orchestrator.tally import aggregate, persist

class SubmissionPipeline:
    """
    One submission: infer -> aggregate -> persist.

    Inference errors propagate (the image could not be analyzed).
    Sheet errors never do; they come back inside TallyResult.outcome.
    """

    def __init__(self, inference, writer, vocabulary, status_store):
        self.inference = inference
        self.writer = writer
        self.vocabulary = tuple(dict.fromkeys(vocabulary))
        self.status = status_store

    def process(self, image_bytes: bytes, submission_id: str | None) -> TallyResult:
        t0 = time.time()
        self.status.log(f"submission={submission_id!r} start ({len(image_bytes)} bytes)")

        # 1) inference: may raise InferenceError
        raw = self.inference.infer(image_bytes, submission_id)

        # 2) tally
        row, diagnostics = aggregate(raw, submission_id, self.vocabulary)
        for line in diagnostics:
            self.status.log(line, level="debug")
        self.status.log(f"tally: {row.class_counts} total={row.total}")

        # 3) best-effort persist
        outcome = persist(row, self.writer, status_store=self.status)

        dt = int((time.time() - t0) * 1000)
        self.status.log(f"submission={submission_id!r} done outcome={outcome.kind.value} dt={dt}ms")
        return TallyResult(row=row, outcome=outcome, diagnostics=tuple(diagnostics))
