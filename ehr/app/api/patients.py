"""
Ward dashboard pages: list/filter, add, edit and delete patients.
"""
import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from ehr.app.core.database import get_db
from ehr.app.core.errors import PersistenceError
from ehr.app.models.forms import PatientFilter, ALL_DEPARTMENTS, form_payload
from ehr.app.models.patient import DEPARTMENTS, STATUSES
from ehr.app.services import patients as patient_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["patients"])

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

ADD_FAILED_MESSAGE = "Failed to add patient"


def _number(value):
    # 40.0 -> "40", 0.5 -> "0.5"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


templates.env.filters["number"] = _number


def _redirect(url):
    return RedirectResponse(url=url, status_code=303)


async def patient_form(request: Request):
    return form_payload(await request.form())


@router.get("/", response_class=HTMLResponse)
def patient_list(
    request: Request,
    search: Optional[str] = None,
    department: Optional[str] = None,
    error: Optional[str] = None,
    db: Session = Depends(get_db),
):
    criteria = PatientFilter(search=search, department=department)
    try:
        patients = patient_service.list_patients(db, criteria)
    except PersistenceError:
        return PlainTextResponse("Server Error", status_code=500)

    stats = patient_service.compute_stats(patients)

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "patients": patients,
            "search": search or "",
            "currentDept": department or ALL_DEPARTMENTS,
            "stats": stats,
            "error": ADD_FAILED_MESSAGE if error else None,
            "departments": DEPARTMENTS,
            "statuses": STATUSES,
        },
    )


@router.post("/add")
def add_patient(
    payload: dict = Depends(patient_form),
    db: Session = Depends(get_db),
):
    result = patient_service.create_patient(db, payload)
    if not result.success:
        return _redirect("/?" + urlencode({"error": ADD_FAILED_MESSAGE}))
    return _redirect("/")


@router.get("/edit/{patient_id}", response_class=HTMLResponse)
def edit_patient_page(
    patient_id: str,
    request: Request,
    db: Session = Depends(get_db),
):
    result = patient_service.get_patient(db, patient_id)
    if not result.success:
        return _redirect("/")

    return templates.TemplateResponse(
        request,
        "edit.html",
        {
            "patient": result.patient,
            "departments": DEPARTMENTS,
            "statuses": STATUSES,
        },
    )


@router.post("/edit/{patient_id}")
def edit_patient_submit(
    patient_id: str,
    payload: dict = Depends(patient_form),
    db: Session = Depends(get_db),
):
    result = patient_service.update_patient(db, patient_id, payload)
    if not result.success:
        return _redirect(f"/edit/{patient_id}")
    return _redirect("/")


@router.post("/delete/{patient_id}")
def delete_patient(
    patient_id: str,
    db: Session = Depends(get_db),
):
    result = patient_service.delete_patient(db, patient_id)
    if not result.success:
        logger.info("Delete of %s not applied: %s", patient_id, result.error)
    return _redirect("/")
