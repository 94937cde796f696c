# FastAPI dependencies package
