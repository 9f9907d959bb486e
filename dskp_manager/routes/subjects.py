import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from dskp_manager.database import get_db
from dskp_manager.models.school import SchoolClass, Subject, DSKPItem
from dskp_manager.schemas.dskp_schema import (
    ClassCreate,
    ClassResponse,
    DSKPItemCreate,
    DSKPItemCreated,
    DSKPItemResponse,
    SubjectCreate,
    SubjectCreated,
    SubjectResponse,
)

router = APIRouter(prefix="/api", tags=["subjects"])
logger = logging.getLogger(__name__)

async def _get_class_or_404(db: AsyncSession, class_id: int) -> SchoolClass:
    school_class = await db.get(SchoolClass, class_id)
    if not school_class:
        raise HTTPException(status_code=404, detail="Class not found")
    return school_class

async def _get_subject_or_404(db: AsyncSession, subject_id: int) -> Subject:
    subject = await db.get(Subject, subject_id)
    if not subject:
        raise HTTPException(status_code=404, detail="Subject not found")
    return subject

# --- Classes ---
@router.post("/classes", response_model=ClassResponse)
async def create_class(req: ClassCreate, db: AsyncSession = Depends(get_db)):
    new_class = SchoolClass(year=req.year, name=req.name)
    db.add(new_class)
    await db.commit()
    await db.refresh(new_class)
    return new_class

@router.get("/classes/{class_id}", response_model=ClassResponse)
async def get_class(class_id: int, db: AsyncSession = Depends(get_db)):
    return await _get_class_or_404(db, class_id)

# --- Subjects ---
@router.get("/classes/{class_id}/subjects", response_model=List[SubjectResponse])
async def get_subjects(class_id: int, db: AsyncSession = Depends(get_db)):
    await _get_class_or_404(db, class_id)
    result = await db.execute(
        select(Subject).where(Subject.class_id == class_id).order_by(Subject.id)
    )
    return result.scalars().all()

@router.post("/classes/{class_id}/subjects", response_model=SubjectCreated)
async def create_subject(class_id: int, req: SubjectCreate, db: AsyncSession = Depends(get_db)):
    await _get_class_or_404(db, class_id)
    new_subject = Subject(class_id=class_id, name=req.name)
    db.add(new_subject)
    await db.commit()
    await db.refresh(new_subject)
    logger.info(f"Created subject {new_subject.id} ({new_subject.name}) for class {class_id}")
    return SubjectCreated(id=new_subject.id)

# --- DSKP items ---
@router.get("/subjects/{subject_id}/dskp", response_model=List[DSKPItemResponse])
async def get_dskp_items(subject_id: int, db: AsyncSession = Depends(get_db)):
    await _get_subject_or_404(db, subject_id)
    result = await db.execute(
        select(DSKPItem).where(DSKPItem.subject_id == subject_id).order_by(DSKPItem.id)
    )
    return result.scalars().all()

@router.post("/subjects/{subject_id}/dskp", response_model=DSKPItemCreated)
async def create_dskp_item(subject_id: int, req: DSKPItemCreate, db: AsyncSession = Depends(get_db)):
    await _get_subject_or_404(db, subject_id)
    new_item = DSKPItem(subject_id=subject_id, sk=req.sk, sp=req.sp)
    db.add(new_item)
    await db.commit()
    await db.refresh(new_item)
    return DSKPItemCreated(id=new_item.id)
