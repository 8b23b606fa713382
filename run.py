#!/usr/bin/env python3
"""Run the workforce service"""
import uvicorn
from workforce_service.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "workforce_service.main:app",
        host="0.0.0.0",
        port=settings.service_port,
        reload=settings.debug,
        log_level="info"
    )
