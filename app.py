import os

from flask import Flask, jsonify
from flask_cors import CORS

from api_v1 import init_api
from liberation_engine.policy import POLICY_VERSION
from observability import SERVICE_VERSION, init_observability

app = Flask(__name__)

# ============================================================
# LIBERATION ENGINE (RULE-BASED, NO MODEL DEPENDENCY)
#
# - Five-dimension values validation, strict and critical-only modes
# - Journey stage classification with bounded per-user history
# - Rule-gated stage progression
# - Oppression pattern scanning
# ============================================================
ENGINE_VERSION = "liberation-engine-v1.0"

CORS(app, resources={r"/api/*": {"origins": os.getenv("CORS_ORIGINS", "*").split(",")}})
init_observability(app)
init_api(app)


@app.route("/health")
def health():
    return jsonify({
        "status": "ok",
        "version": ENGINE_VERSION,
        "policy": POLICY_VERSION,
        "release": SERVICE_VERSION,
    })


if __name__ == "__main__":
    port = int(os.getenv("PORT", "5000"))
    app.run(host="0.0.0.0", port=port, debug=os.getenv("FLASK_DEBUG", "0") == "1")
