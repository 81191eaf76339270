from flask import Flask, request, jsonify, send_file
from compliance import ComplianceService
from errors import AuthenticationRequired, ComplianceError, ValidationFailed
from events import EventPublisher
from extract import ALL_ALLOWED, ext, extract_text
from llm import gemini_status
from store import DocumentStore, UserStore
import io, os, logging

MAX_UPLOAD_MB = int(os.environ.get("MAX_UPLOAD_MB", "10"))

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_MB * 1024 * 1024

# ── Process-wide state ───────────────────────────────────────────────────────
documents = DocumentStore()
users     = UserStore()
events    = EventPublisher()
service   = ComplianceService(documents, users, events)


# ── Helpers ──────────────────────────────────────────────────────────────────

def _current_user():
    user_id = request.headers.get("X-User-Id", "").strip()
    if not user_id:
        raise AuthenticationRequired("Missing X-User-Id header")
    user = service.users.get(user_id)
    if user is None or not user.is_active:
        raise AuthenticationRequired("Unknown or inactive user")
    return user

def _json_body() -> dict:
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationFailed("Request body must be a JSON object")
    return body

def _form_regulations():
    values = request.form.getlist("regulations")
    if not values:
        return None
    regs = []
    for v in values:
        regs.extend(part for part in v.split(",") if part.strip())
    return regs

def _submission_payload() -> dict:
    """JSON body as-is, or a multipart form whose `file` is turned into content."""
    if request.is_json:
        return _json_body()

    upload = request.files.get("file")
    content = request.form.get("content", "")
    name = request.form.get("documentName", "")
    if upload and upload.filename:
        kind = ext(upload.filename)
        if kind not in ALL_ALLOWED:
            raise ValidationFailed(f"Unsupported file type: {kind}")
        content = extract_text(upload.filename, upload.read())
        name = name or upload.filename

    return {
        "documentName": name,
        "documentType": request.form.get("documentType") or None,
        "regulations":  _form_regulations(),
        "content":      content,
    }


# ── Error responses ──────────────────────────────────────────────────────────

@app.errorhandler(ComplianceError)
def handle_compliance_error(e):
    if e.status_code >= 500:
        app.logger.error("Unhandled pipeline error: %s", e)
    return jsonify({"error": str(e)}), e.status_code

@app.errorhandler(413)
def handle_too_large(e):
    return jsonify({"error": f"Upload exceeds {MAX_UPLOAD_MB}MB."}), 413


# ── REST API ─────────────────────────────────────────────────────────────────

@app.route("/api/health", methods=["GET"])
def api_health():
    return jsonify({"status": "ok", "version": "1.0", "llm": gemini_status()})


@app.route("/api/llm/status", methods=["GET"])
def api_llm_status():
    return jsonify(gemini_status())


@app.route("/api/users", methods=["POST"])
def api_register():
    user = service.register_user(_json_body())
    return jsonify(user.to_dict()), 201


@app.route("/api/users/lawyers", methods=["GET"])
def api_lawyers():
    return jsonify([u.to_dict() for u in service.list_lawyers()])


@app.route("/api/documents", methods=["POST"])
def api_submit():
    """
    Submit a document for analysis and review.

    Accepts:
      • application/json    → { "documentName", "content", "documentType"?, "regulations"? }
      • multipart/form-data → file field (txt, pdf or image) plus the same form fields
    """
    actor = _current_user()
    doc = service.submit_document(actor, _submission_payload())
    return jsonify(doc.to_dict()), 201


@app.route("/api/documents", methods=["GET"])
def api_list():
    actor = _current_user()
    return jsonify([d.to_dict(include_content=False) for d in service.list_documents(actor)])


@app.route("/api/documents/<doc_id>", methods=["GET"])
def api_get(doc_id):
    actor = _current_user()
    return jsonify(service.get_document(actor, doc_id).to_dict())


@app.route("/api/documents/<doc_id>/status", methods=["PATCH"])
def api_status(doc_id):
    actor = _current_user()
    body = _json_body()
    doc = service.update_status(actor, doc_id, body.get("status"), body.get("lawyerNotes"))
    return jsonify(doc.to_dict())


@app.route("/api/documents/<doc_id>/analyze", methods=["POST"])
def api_reanalyze(doc_id):
    actor = _current_user()
    return jsonify(service.reanalyze_document(actor, doc_id).to_dict())


# ── Export routes ────────────────────────────────────────────────────────────

@app.route("/api/documents/<doc_id>/export/pdf")
def api_export_pdf(doc_id):
    doc = service.get_document(_current_user(), doc_id)
    from exporters import export_pdf as gen
    return send_file(io.BytesIO(gen(doc)),
        mimetype="application/pdf", as_attachment=True,
        download_name=f"compliance_report_{doc.id}.pdf")

@app.route("/api/documents/<doc_id>/export/csv")
def api_export_csv(doc_id):
    doc = service.get_document(_current_user(), doc_id)
    from exporters import export_csv as gen
    return send_file(io.BytesIO(gen(doc)),
        mimetype="text/csv", as_attachment=True,
        download_name=f"compliance_report_{doc.id}.csv")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.run(debug=True, port=5050)
