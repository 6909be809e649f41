#!/usr/bin/env python3
"""
Abyss - local conversation client
Simple startup script for the API server
"""

import uvicorn

if __name__ == "__main__":
    print("Starting Abyss conversation client...")
    print("API Documentation: http://localhost:8000/docs")
    print("Conversation: http://localhost:8000/api/conversation")
    uvicorn.run("abyss.main:app", host="127.0.0.1", port=8000, reload=True)
