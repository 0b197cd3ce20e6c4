#!/usr/bin/env python
"""
Development server entry point

Usage:
    python run.py
    flask --app run init-db
"""

from societyhub import create_app

app = create_app()

if __name__ == '__main__':
    # Print registered routes for debugging
    print("\n=== Registered Routes ===")
    for rule in app.url_map.iter_rules():
        print(f"{rule.rule:40s} -> {rule.endpoint}")
    print("=" * 70)

    app.run(host='0.0.0.0', port=5001, debug=True)
