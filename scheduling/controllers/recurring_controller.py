# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Recurring job templates and generation.
Thin HTTP layer — delegates ALL logic to TemplateService / RecurringJobGenerator.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from scheduling.core.dependencies import get_generator, get_template_service
from scheduling.models.domain import RecurringJobInstance, RecurringJobTemplate
from scheduling.schemas.scheduling import (
    GenerateAllRequest,
    GenerateRequest,
    GenerateResponse,
    TemplateCreateRequest,
)
from scheduling.services.recurring_job_generator import RecurringJobGenerator
from scheduling.services.template_service import TemplateService

router = APIRouter(prefix="/api/v1/recurring-templates", tags=["Recurring Jobs"])


@router.post("", status_code=201, response_model=RecurringJobTemplate)
def create_template(
    payload: TemplateCreateRequest,
    service: TemplateService = Depends(get_template_service),
):
    """Create a recurring job template."""
    try:
        return service.create_template(
            organization_id=payload.organization_id,
            name=payload.name,
            description=payload.description,
            address=payload.address,
            job_type=payload.job_type,
            priority=payload.priority,
            recurrence_pattern=payload.recurrence_pattern,
            recurrence_day=payload.recurrence_day,
            start_date=payload.start_date,
            end_date=payload.end_date,
            start_time=payload.start_time,
            end_time=payload.end_time,
            assigned_to=payload.assigned_to,
            auto_skip_conflicts=payload.auto_skip_conflicts,
            created_by=payload.acting_user_id,
        )
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("")
def list_templates(
    organization_id: Optional[str] = None,
    service: TemplateService = Depends(get_template_service),
):
    """List templates with recurrence labels and generated/skipped counts."""
    return service.list_templates(organization_id)


@router.post("/generate-all")
def generate_all(
    payload: GenerateAllRequest,
    generator: RecurringJobGenerator = Depends(get_generator),
):
    """Run every active template, e.g. from a nightly job."""
    return generator.generate_all_active(
        organization_id=payload.organization_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        acting_user_id=payload.acting_user_id,
    )


@router.get("/{template_id}", response_model=RecurringJobTemplate)
def get_template(
    template_id: str,
    service: TemplateService = Depends(get_template_service),
):
    try:
        return service.get_template(template_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{template_id}/toggle", response_model=RecurringJobTemplate)
def toggle_template(
    template_id: str,
    service: TemplateService = Depends(get_template_service),
):
    """Pause an active template or reactivate a paused one."""
    try:
        return service.toggle_active(template_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{template_id}")
def delete_template(
    template_id: str,
    service: TemplateService = Depends(get_template_service),
):
    """Delete a template. Jobs it already generated are kept."""
    try:
        return service.delete_template(template_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{template_id}/instances", response_model=list[RecurringJobInstance])
def list_instances(
    template_id: str,
    service: TemplateService = Depends(get_template_service),
):
    try:
        return service.list_instances(template_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{template_id}/generate", response_model=GenerateResponse)
def generate_now(
    template_id: str,
    payload: Optional[GenerateRequest] = None,
    generator: RecurringJobGenerator = Depends(get_generator),
):
    """Generate dated jobs for a template ("Generate Now")."""
    payload = payload or GenerateRequest()
    try:
        result = generator.generate(
            template_id,
            start_date=payload.start_date,
            end_date=payload.end_date,
            acting_user_id=payload.acting_user_id,
        )
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    message = f"Created {result.generated} jobs"
    if result.skipped:
        message += f", skipped {result.skipped} due to conflicts"
    if result.failures:
        message += f", {len(result.failures)} failed"
    return GenerateResponse(
        template_id=result.template_id,
        generated=result.generated,
        skipped=result.skipped,
        results=result.results,
        failures=[f.model_dump(mode="json") for f in result.failures],
        message=message,
    )
