"""Run the SkillVector API from project root. Use: python run_app.py"""
import os

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "skillvector.app:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "").lower() in ("1", "true", "yes"),
    )
