from flask import Flask, request, jsonify
from flask_cors import CORS
import mini_compiler

logger = mini_compiler.logger

DEFAULT_CONFIG = {
    'MAX_SOURCE_LENGTH': 64 * 1024,
}

def ast_to_dict(node):
    """
    Serialize AST to a flat node list: {"root": 0, "nodes": [...]}.
    Each node has its type, payload and the indexes of its children, so
    long operator chains do not turn into deeply nested JSON.
    """
    if node is None:
        return None
    nodes = []
    # (node, index of the parent entry or None)
    stack = [(node, None)]
    while stack:
        current, parent = stack.pop()
        idx = len(nodes)
        nodes.append({"type": current.node_type, "value": current.value, "children": []})
        if parent is not None:
            nodes[parent]["children"].append(idx)
        for child in reversed(current.children):
            stack.append((child, idx))
    return {"root": 0, "nodes": nodes}

def symbols_to_list(symbols):
    return [
        {"name": name, "type": typ, "value": value.text}
        for name, typ, value in symbols.entries()
    ]

def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_mapping(DEFAULT_CONFIG)
    app.config.from_prefixed_env()
    if test_config is not None:
        app.config.from_mapping(test_config)
    app.json.sort_keys = False
    CORS(app)  # allow cross-origin requests

    @app.route("/health", methods=["GET"])
    def health_check():
        return jsonify({"status": "healthy"})

    @app.route("/compile", methods=["POST"])
    def compile_code():
        data = request.get_json(silent=True) or {}
        code = data.get("code")
        if not isinstance(code, str):
            return jsonify({"errors": ["'code' must be a string"]}), 400
        if len(code) > app.config['MAX_SOURCE_LENGTH']:
            return jsonify({"errors": ["source too large"]}), 400
        try:
            result = mini_compiler.compile_source(code)

            # Process tokens to match terminal format
            processed_tokens = [
                {"kind": tok.kind, "text": tok.text, "lineno": tok.lineno}
                for tok in result['tokens']
            ]

            response = {
                "tokens": processed_tokens,
                "ast": ast_to_dict(result['ast']) if result['ast'] else {},
                "tac": result['tac'],
                "symbol_table": symbols_to_list(result['symbol_table']),
                "errors": result['errors'],
            }
            return jsonify(response)
        except Exception as e:
            logger.exception("unexpected failure while compiling")
            return jsonify({
                "tokens": [],
                "ast": {},
                "tac": [],
                "symbol_table": [],
                "errors": [f"Unexpected error: {str(e)}"],
            }), 500

    return app

app = create_app()

if __name__ == "__main__":
    app.run(debug=True)
