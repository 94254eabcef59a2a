from sqlalchemy.orm import Session
from bledor.core.storage import commit
from bledor.models.log import Log

# Add an audit entry to the current unit of work without committing it
def stage_log(db: Session, *, user_id, action, resource, status="SUCCESS", ip=None, meta=None) -> Log:
    entry = Log(user_id=user_id, action=action, resource=resource, status=status, ip=ip, meta=meta or {})
    db.add(entry)
    return entry

def write_log(db: Session, *, user_id, action, resource, status="SUCCESS", ip=None, meta=None):
    stage_log(db, user_id=user_id, action=action, resource=resource, status=status, ip=ip, meta=meta)
    commit(db)

def client_ip(request) -> str:
    return request.client.host if request and request.client else None
