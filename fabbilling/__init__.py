"""FabBilling: invoicing and payment schedules for fab-labs."""
