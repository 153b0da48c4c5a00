"""
Fake Roboflow workflow server for running the service without a Roboflow account.

Answers POST /workflow in the workflow output shape
({"outputs": [{"predictions": {"predictions": [...]}}]}).
Send api_key "reject" to get a 401 with a provider error message.

Usage:
    python -m nutcounter.scripts.fake_workflow_server             (terminal 1)
    ROBOFLOW_API_KEY=dev ROBOFLOW_WORKFLOW_URL=http://localhost:9000/workflow \\
        uvicorn nutcounter.services.api:app                         (terminal 2)
"""

import random
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

app = FastAPI(title="fake-roboflow-workflow")

LABELS = ["walnut", "almond", "pistachio"]


def _fake_predictions(seed: int) -> list[dict]:
    rng = random.Random(seed)
    return [
        {"class": rng.choice(LABELS), "confidence": round(rng.uniform(0.6, 0.99), 2)}
        for _ in range(rng.randint(0, 8))
    ]


@app.post("/workflow")
async def workflow(request: Request):
    body = await request.json()
    if body.get("api_key") == "reject":
        print("[workflow] rejecting request (api_key=reject)")
        return JSONResponse(status_code=401, content={"message": "Unauthorized api_key"})

    image = body.get("inputs", {}).get("image", {}).get("value", "")
    preds = _fake_predictions(len(image))
    print(f"[workflow] {len(image)} b64 chars -> {len(preds)} predictions")
    return {"outputs": [{"predictions": {"image": {"width": 640, "height": 480}, "predictions": preds}}]}


if __name__ == "__main__":
    print("Fake workflow server starting on http://localhost:9000")
    uvicorn.run(app, host="0.0.0.0", port=9000)
