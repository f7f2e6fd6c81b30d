# app/core/messages.py
# Testi mostrati all'utente dopo ogni operazione (titolo, descrizione).

CREATED = ("Assignment created", "Your new assignment has been added.")
COMPLETED = ("Assignment completed! 🎉", "Great job on finishing your assignment!")
REOPENED = ("Assignment reopened", "Assignment marked as incomplete.")
DELETED = ("Assignment deleted", "The assignment has been removed.")

LOAD_FAILED = "Failed to load assignments. Please try again."
CREATE_FAILED = "Failed to create assignment. Please try again."
UPDATE_FAILED = "Failed to update assignment. Please try again."
DELETE_FAILED = "Failed to delete assignment. Please try again."
