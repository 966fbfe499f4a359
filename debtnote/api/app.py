"""FastAPI application entry point."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from debtnote.api.routes import calculator, customers, loans, payments, dashboard
from debtnote.config import configure_logging

configure_logging()

app = FastAPI(
    title="DebtNote",
    description="Loan management back office",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(calculator.router)
app.include_router(customers.router)
app.include_router(loans.router)
app.include_router(payments.router)
app.include_router(dashboard.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
