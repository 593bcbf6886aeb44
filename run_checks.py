"""
Manual smoke run of the issue lifecycle over HTTP against in-memory storage:
submit, duplicate, upvote to verified, staff resolve, citizen confirm.
"""

from fastapi.testclient import TestClient

from app.main import app
from app.repositories.memory_repository import InMemoryRepository
from app.services.issue_service import IssueService, get_issue_service

service = IssueService(InMemoryRepository()).load()
app.dependency_overrides[get_issue_service] = lambda: service
client = TestClient(app)

report = {
    "title": "Large pothole on Main Street",
    "description": "Deep pothole near the bus stop",
    "category": "Pothole",
    "location": {"lat": 28.6139, "lng": 77.2090, "address": "Main Street, New Delhi"},
    "submittedBy": "citizen1",
}

print('SUBMIT:')
created = client.post('/issues', json=report)
print(created.status_code, created.json()['status'], created.json()['department'])
issue_id = created.json()['id']

print('\nDUPLICATE SUBMIT:')
dup = client.post('/issues', json={**report, "location": {"lat": 28.6140, "lng": 77.2091}})
print(dup.status_code, dup.json())

print('\nUPVOTES:')
for _ in range(5):
    voted = client.post(f'/issues/{issue_id}/upvote').json()
print(voted['communityUpvotes'], voted['status'])

print('\nSTAFF RESOLVE:')
resolved = client.patch(f'/admin/issues/{issue_id}/status', json={"status": "resolved", "assignedTo": "admin1"})
print(resolved.status_code, resolved.json()['status'])

print('\nCITIZEN CONFIRM:')
confirmed = client.post(f'/issues/{issue_id}/confirm', json={"rating": 4, "comment": "Fixed"})
print(confirmed.status_code, confirmed.json()['status'], confirmed.json()['resolutionRating'])

print('\nHISTORY:')
for entry in confirmed.json()['statusHistory']:
    print(f"  {entry['fromStatus']} -> {entry['toStatus']} by {entry['changedBy']}")

print('\nDASHBOARD STATS:')
print(client.get('/admin/stats').json())

app.dependency_overrides.clear()
