import os
import uvicorn
from adparlay.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "adparlay.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        log_level=settings.LOG_LEVEL.lower(),
        reload=settings.is_development
    )
