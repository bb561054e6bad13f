"""HTTP routes for HackEM News."""

import asyncio

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from .logger import get_logger
from .orchestrator import AggregationOrchestrator, UnknownSourceError


logger = get_logger()


def _run(coroutine):
    """Run a pipeline coroutine on a fresh event loop for this request."""
    return asyncio.run(coroutine)


def create_app(orchestrator: AggregationOrchestrator) -> Flask:
    """
    Create the Flask app serving the pipeline.

    Args:
        orchestrator: Fully wired aggregation orchestrator

    Returns:
        Flask app instance
    """
    app = Flask(__name__)
    app.config['ORCHESTRATOR'] = orchestrator

    @app.route("/api/articles")
    def articles():
        """Relevant articles, scored but without summaries."""
        results = _run(orchestrator.get_top_articles())
        logger.info(f"API: Sending {len(results)} articles")
        return jsonify([a.to_dict() for a in results])

    @app.route("/api/top-em-stories")
    def top_stories():
        """Relevant articles with summaries (main endpoint for the frontend)."""
        stories = _run(orchestrator.get_top_stories())
        logger.info(f"API: Sending {len(stories)} articles with summaries")
        return jsonify([a.to_dict() for a in stories])

    @app.route("/api/summary/<item_id>")
    def summary(item_id):
        source = request.args.get('source') or None
        try:
            text = _run(orchestrator.summarize_article(item_id, source))
        except UnknownSourceError:
            return jsonify({'error': f"Unknown source: {source}"}), 404

        if text is None:
            return jsonify({'error': 'Article not found'}), 404
        return jsonify({'id': item_id, 'summary': text})

    @app.route("/api/<source>-posts")
    def source_posts(source):
        """Raw adapter output for debugging."""
        try:
            posts = _run(orchestrator.get_source_posts(source))
        except UnknownSourceError:
            return jsonify({'error': f"Unknown source: {source}"}), 404
        return jsonify({'count': len(posts), 'posts': [p.to_dict() for p in posts]})

    @app.route("/api/clear-cache", methods=["POST"])
    def clear_cache():
        stats = orchestrator.clear_caches()
        logger.info("Cache cleared manually via API endpoint")
        return jsonify({
            'success': True,
            'message': 'Cache cleared successfully',
            'stats': {f"{name}CacheKeysCleared": count for name, count in stats.items()}
        })

    @app.errorhandler(Exception)
    def handle_error(error):
        if isinstance(error, HTTPException):
            return jsonify({'error': error.description}), error.code
        logger.error(f"Unhandled error serving {request.path}: {error}", exc_info=True)
        return jsonify({'error': 'Internal server error'}), 500

    return app
