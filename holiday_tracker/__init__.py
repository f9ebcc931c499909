"""Holiday Tracker: staff absences and holiday request workflow."""
