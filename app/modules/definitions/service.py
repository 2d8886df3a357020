from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException
from supabase import Client

from app.modules.definitions.schemas import DefinitionCreate, DefinitionUpdate, DefinitionResponse


class DefinitionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_definitions(self, definition_type: Optional[str] = None, include_inactive: bool = False) -> List[DefinitionResponse]:
        try:
            query = self.supabase.table("general_definitions").select("*")
            if definition_type:
                query = query.eq("definition_type", definition_type)
            if not include_inactive:
                query = query.eq("is_active", True)
            result = query.order("sort_order").execute()
            return [DefinitionResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_definition(self, data: DefinitionCreate) -> DefinitionResponse:
        try:
            existing = self.supabase.table("general_definitions")\
                .select("id")\
                .eq("definition_type", data.definition_type)\
                .eq("name", data.name.strip())\
                .execute()
            if existing.data:
                raise HTTPException(status_code=409, detail="Definition already exists")

            payload = data.model_dump()
            payload["name"] = data.name.strip()
            result = self.supabase.table("general_definitions").insert(payload).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create definition")
            return DefinitionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_definition(self, definition_id: str, data: DefinitionUpdate) -> DefinitionResponse:
        try:
            update_data = data.model_dump(exclude_none=True)
            if "name" in update_data:
                update_data["name"] = update_data["name"].strip()
            update_data["updated_at"] = datetime.utcnow().isoformat()
            result = self.supabase.table("general_definitions")\
                .update(update_data)\
                .eq("id", definition_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Definition not found")
            return DefinitionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_definition(self, definition_id: str) -> bool:
        try:
            result = self.supabase.table("general_definitions")\
                .delete()\
                .eq("id", definition_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Definition not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
