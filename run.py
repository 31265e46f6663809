import os
import uvicorn

from optionality_os.config import settings

if __name__ == "__main__":
    port = settings.PORT

    print(f"\n>> Server starting at http://localhost:{port}")
    print(f">> API Documentation: http://localhost:{port}/docs\n")

    # Disable reload in production (when PORT is provided by environment)
    is_prod = os.environ.get("PORT") is not None
    uvicorn.run("optionality_os.main:app", host="0.0.0.0", port=port, reload=not is_prod)
