#!/usr/bin/env python3
"""
Main entry point for the Moyori meeting point API
"""

import os

from moyori.app import create_app

app = create_app()

if __name__ == '__main__':
    port = int(os.getenv('PORT', '5001'))
    app.run(debug=os.getenv('FLASK_DEBUG') == '1', host='0.0.0.0', port=port)
